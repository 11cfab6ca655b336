"""Value types exchanged between the CLI, CI providers and the publisher."""
