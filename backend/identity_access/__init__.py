"""Identity access: principals, profiles, data access and the authorization gate."""
