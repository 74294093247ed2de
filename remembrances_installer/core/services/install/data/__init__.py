"""L0 Data: constants and templates used by the install service."""
