"""Client module - sync root discovery, baseline, transport and CLI."""
