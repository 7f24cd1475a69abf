"""CLI package for rcache."""
