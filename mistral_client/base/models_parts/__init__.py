"""Models parts package (one concern per file); import via ``mistral_client.base.models``."""
