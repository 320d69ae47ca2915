"""Report model, layout and renderers for the yearly report."""
