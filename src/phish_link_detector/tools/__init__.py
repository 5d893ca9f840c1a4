"""Link analysis tools."""
