"""The fixed catalogue of consistency checks and their payload normalizers.

Every check pairs an LDAP query with a pure ``normalize`` function that turns
the entries one server returned into the unit compared across servers: an
integer count, a ``YES``/``NO`` flag, or an ordered tuple of replication
agreements. Entries arrive keyed by lower-cased attribute name.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Final

from ipacheck.domain.models import ComparableUnit, Entry, ReplicationRecord, Scope

Normalizer = Callable[[Sequence[Entry]], ComparableUnit]

_STATUS_CODE = re.compile(r"^\s*(?:error\s*)?\(?\s*(-?\d+)\s*\)?", re.IGNORECASE)


def _first_value(entries: Sequence[Entry], attribute: str) -> str | None:
    key = attribute.lower()
    for entry in entries:
        values = entry.get(key)
        if values:
            return values[0]
    return None


def _as_count(value: str) -> int | str:
    text = value.strip()
    if text.isdecimal():
        return int(text)
    return text


def attribute_count(attribute: str) -> Normalizer:
    """Read a numeric attribute (e.g. ``numSubordinates``) from the first entry."""

    def normalize(entries: Sequence[Entry]) -> ComparableUnit:
        value = _first_value(entries, attribute)
        if value is None:
            return ""
        return _as_count(value)

    return normalize


def entry_count(attribute: str) -> Normalizer:
    """Count the entries carrying *attribute*."""

    key = attribute.lower()

    def normalize(entries: Sequence[Entry]) -> ComparableUnit:
        count = sum(1 for entry in entries if entry.get(key))
        return count if count else ""

    return normalize


def presence_flag(attribute: str) -> Normalizer:
    """``YES`` when any entry carries *attribute*, ``NO`` otherwise."""

    key = attribute.lower()

    def normalize(entries: Sequence[Entry]) -> ComparableUnit:
        present = any(entry.get(key) for entry in entries)
        return "YES" if present else "NO"

    return normalize


def anonymous_access_flag(entries: Sequence[Entry]) -> ComparableUnit:
    value = _first_value(entries, "nsslapd-allow-anonymous-access")
    if value is None:
        return ""
    lowered = value.strip().lower()
    if lowered == "on":
        return "YES"
    if lowered in {"off", "rootdse"}:
        return "NO"
    return value.strip().upper()


def replication_status_code(status: str) -> str:
    """Extract the numeric code from ``nsds5replicaLastUpdateStatus``."""

    match = _STATUS_CODE.match(status)
    if match:
        return match.group(1)
    return status.strip()


def replication_agreements(entries: Sequence[Entry]) -> ComparableUnit:
    records: list[ReplicationRecord] = []
    for entry in entries:
        hosts = entry.get("nsds5replicahost")
        if not hosts:
            continue
        peer = hosts[0].strip().split(".", 1)[0].lower()
        statuses = entry.get("nsds5replicalastupdatestatus") or [""]
        records.append(ReplicationRecord(peer=peer, status=replication_status_code(statuses[0])))
    return tuple(sorted(records))


@dataclass(frozen=True)
class Check:
    name: str
    label: str
    base: str
    search_filter: str
    attributes: tuple[str, ...]
    scope: Scope
    normalize: Normalizer
    reference_value: str | None = None
    contributes: bool = True

    def base_dn(self, suffix: str) -> str:
        return self.base.format(suffix=suffix)


def _subordinates(name: str, label: str, base: str) -> Check:
    return Check(
        name=name,
        label=label,
        base=base,
        search_filter="(objectClass=*)",
        attributes=("numSubordinates",),
        scope=Scope.BASE,
        normalize=attribute_count("numSubordinates"),
    )


CHECKS: Final[tuple[Check, ...]] = (
    _subordinates("users", "Active Users", "cn=users,cn=accounts,{suffix}"),
    _subordinates(
        "staged_users", "Stage Users", "cn=staged users,cn=accounts,cn=provisioning,{suffix}"
    ),
    _subordinates(
        "preserved_users",
        "Preserved Users",
        "cn=deleted users,cn=accounts,cn=provisioning,{suffix}",
    ),
    _subordinates("groups", "User Groups", "cn=groups,cn=accounts,{suffix}"),
    _subordinates("hosts", "Hosts", "cn=computers,cn=accounts,{suffix}"),
    _subordinates("hostgroups", "Host Groups", "cn=hostgroups,cn=accounts,{suffix}"),
    _subordinates("hbac_rules", "HBAC Rules", "cn=hbac,{suffix}"),
    _subordinates("sudo_rules", "SUDO Rules", "cn=sudorules,cn=sudo,{suffix}"),
    Check(
        name="dns_zones",
        label="DNS Zones",
        base="cn=dns,{suffix}",
        search_filter="(|(objectClass=idnsZone)(objectClass=idnsForwardZone))",
        attributes=("idnsName",),
        scope=Scope.ONE,
        normalize=entry_count("idnsName"),
    ),
    Check(
        name="conflicts",
        label="LDAP Conflicts",
        base="{suffix}",
        search_filter=(
            "(|(nsds5ReplConflict=*)(&(objectClass=ldapSubEntry)(nsds5ReplConflict=*)))"
        ),
        attributes=("nsds5ReplConflict",),
        scope=Scope.SUB,
        normalize=presence_flag("nsds5ReplConflict"),
        reference_value="NO",
    ),
    Check(
        name="anonymous_bind",
        label="Anonymous BIND",
        base="cn=config",
        search_filter="(objectClass=*)",
        attributes=("nsslapd-allow-anonymous-access",),
        scope=Scope.BASE,
        normalize=anonymous_access_flag,
    ),
    Check(
        name="replication",
        label="Replication Status",
        base="cn=mapping tree,cn=config",
        search_filter="(objectClass=nsds5ReplicationAgreement)",
        attributes=("nsDS5ReplicaHost", "nsds5replicaLastUpdateStatus"),
        scope=Scope.SUB,
        normalize=replication_agreements,
        contributes=False,
    ),
)

CHECKS_BY_NAME: Final[dict[str, Check]] = {check.name: check for check in CHECKS}
CONTRIBUTING_CHECKS: Final[int] = sum(1 for check in CHECKS if check.contributes)


__all__ = [
    "CHECKS",
    "CHECKS_BY_NAME",
    "CONTRIBUTING_CHECKS",
    "Check",
    "anonymous_access_flag",
    "attribute_count",
    "entry_count",
    "presence_flag",
    "replication_agreements",
    "replication_status_code",
]
