"""CLI subcommands for depsolve."""
