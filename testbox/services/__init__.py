"""Services for testbox."""
