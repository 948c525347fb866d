"""Language server for page object JSON files."""
