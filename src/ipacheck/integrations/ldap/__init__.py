"""LDAP directory access."""

from ipacheck.integrations.ldap.client import (
    BindCredentials,
    DirectoryClient,
    LdapClient,
)

__all__ = [
    "BindCredentials",
    "DirectoryClient",
    "LdapClient",
]
