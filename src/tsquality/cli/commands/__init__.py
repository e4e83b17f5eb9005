"""CLI subcommands; importing a module registers its command on the group."""
