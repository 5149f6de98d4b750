"""
Decoding of ACL array strings such as ``{alice=arwdDxt/alice,=r/bob}``.

Decoding happens in two stages: :func:`split_acl_array` tokenizes the array
literal, :func:`decode_acl_entry` turns one token into an :class:`AclEntry`.
:func:`decode_acl` runs both and aggregates the result into a
:class:`PrivilegeGrantMap`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, NamedTuple, Optional, Tuple

from ..errors import MalformedAclEntry
from ..utils import get_logger

logger = get_logger("catalog.acl")

PUBLIC = "PUBLIC"
GRANT_OPTION = "*"


class Privilege(str, Enum):
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    TRUNCATE = "TRUNCATE"
    RULE = "RULE"
    REFERENCES = "REFERENCES"
    TRIGGER = "TRIGGER"
    EXECUTE = "EXECUTE"
    USAGE = "USAGE"
    CREATE = "CREATE"
    CREATE_TEMP = "CREATE TEMP"
    UNKNOWN = "UNKNOWN"

    def __str__(self) -> str:
        return self.value


PRIVILEGE_CODES: Dict[str, Privilege] = {
    "a": Privilege.INSERT,
    "r": Privilege.SELECT,
    "p": Privilege.SELECT,
    "w": Privilege.UPDATE,
    "d": Privilege.DELETE,
    "D": Privilege.TRUNCATE,
    "R": Privilege.RULE,
    "x": Privilege.REFERENCES,
    "t": Privilege.TRIGGER,
    # Not grantable on tables; decoded for completeness.
    "X": Privilege.EXECUTE,
    "U": Privilege.USAGE,
    "C": Privilege.CREATE,
    "T": Privilege.CREATE_TEMP,
}


class Grant(NamedTuple):
    grantor: Optional[str]
    grantable: bool


@dataclass(frozen=True)
class AclEntry:
    grantee: str
    grantor: Optional[str]
    privileges: Tuple[Tuple[Privilege, bool], ...]
    codes: str


class TablePrivilegeRow(NamedTuple):
    table_cat: Optional[str]
    table_schem: Optional[str]
    table_name: str
    grantor: Optional[str]
    grantee: str
    privilege: str
    is_grantable: str


class PrivilegeGrantMap(Mapping[Privilege, Mapping[str, Tuple[Grant, ...]]]):
    """
    Read-only ``Privilege -> grantee -> (Grant, ...)`` mapping.

    Keys keep the order in which privileges were first seen. Several grants to
    the same grantee from different grantors are all kept.
    """

    def __init__(
        self,
        entries: Tuple[AclEntry, ...] = (),
        malformed: Tuple[MalformedAclEntry, ...] = (),
    ) -> None:
        grants: Dict[Privilege, Dict[str, List[Grant]]] = {}
        for entry in entries:
            for privilege, grantable in entry.privileges:
                by_grantee = grants.setdefault(privilege, {})
                by_grantee.setdefault(entry.grantee, []).append(Grant(entry.grantor, grantable))
        self._grants: Mapping[Privilege, Mapping[str, Tuple[Grant, ...]]] = MappingProxyType(
            {
                privilege: MappingProxyType({grantee: tuple(items) for grantee, items in by_grantee.items()})
                for privilege, by_grantee in grants.items()
            }
        )
        self.entries = tuple(entries)
        self.malformed = tuple(malformed)

    def __getitem__(self, privilege: Privilege) -> Mapping[str, Tuple[Grant, ...]]:
        return self._grants[privilege]

    def __iter__(self) -> Iterator[Privilege]:
        return iter(self._grants)

    def __len__(self) -> int:
        return len(self._grants)

    def __repr__(self) -> str:
        body = {str(privilege): dict(by_grantee) for privilege, by_grantee in self._grants.items()}
        return f"PrivilegeGrantMap({body!r})"


def split_acl_array(text: Optional[str]) -> List[str]:
    """
    Split a brace-delimited ACL array into its raw entries.

    Commas inside double quotes do not separate entries; a backslash before a
    quote keeps it from toggling the quoted state. Entries wrapped in quotes
    lose the wrapping quotes. Empty entries (``{}``) are skipped.
    """
    if not text:
        return []
    tokens: List[str] = []
    in_quotes = False
    begin = 1
    previous = " "
    for index in range(1, len(text)):
        char = text[index]
        if char == '"' and previous != "\\":
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            tokens.append(text[begin:index])
            begin = index + 1
        previous = char
    tokens.append(text[begin : len(text) - 1])

    acls: List[str] = []
    for token in tokens:
        if len(token) >= 2 and token.startswith('"') and token.endswith('"'):
            token = token[1:-1]
        if token:
            acls.append(token)
    return acls


def decode_privilege_codes(codes: str) -> Tuple[Tuple[Privilege, bool], ...]:
    decoded: List[Tuple[Privilege, bool]] = []
    for index, char in enumerate(codes):
        if char == GRANT_OPTION:
            continue
        grantable = codes[index + 1 : index + 2] == GRANT_OPTION
        decoded.append((PRIVILEGE_CODES.get(char, Privilege.UNKNOWN), grantable))
    return tuple(decoded)


def decode_acl_entry(token: str) -> AclEntry:
    """
    Decode ``grantee=codes[/grantor]``.

    Splits on the last ``=`` and then on the last ``/`` of the remainder.
    Raises :class:`MalformedAclEntry` when there is no ``=``.
    """
    grantee, separator, remainder = token.rpartition("=")
    if not separator:
        raise MalformedAclEntry(token)
    codes, slash, grantor = remainder.rpartition("/")
    if not slash:
        codes, grantor = remainder, None
    return AclEntry(
        grantee=grantee or PUBLIC,
        grantor=grantor,
        privileges=decode_privilege_codes(codes),
        codes=codes,
    )


def default_acl_array(owner: str, privileges: str) -> str:
    return "{" + owner + "=" + privileges + "/" + owner + "}"


def decode_acl(
    acl_array: Optional[str],
    owner: str,
    *,
    default_privileges: str,
) -> PrivilegeGrantMap:
    """
    Decode an ACL array into a :class:`PrivilegeGrantMap`.

    ``None`` stands for the object's default ACL: ``owner`` holds
    ``default_privileges`` granted by itself. Entries without ``=`` are dropped
    and kept on :attr:`PrivilegeGrantMap.malformed`.
    """
    if acl_array is None:
        acl_array = default_acl_array(owner, default_privileges)
    entries: List[AclEntry] = []
    malformed: List[MalformedAclEntry] = []
    for token in split_acl_array(acl_array):
        try:
            entries.append(decode_acl_entry(token))
        except MalformedAclEntry as exc:
            logger.debug("Dropping ACL entry %r: %s", token, exc)
            malformed.append(exc)
    return PrivilegeGrantMap(tuple(entries), tuple(malformed))


def grant_rows(
    grant_map: PrivilegeGrantMap,
    schema: Optional[str],
    table: str,
    *,
    catalog: Optional[str] = None,
) -> List[TablePrivilegeRow]:
    """
    Flatten a grant map into table-privilege rows ordered by privilege, then grantee.
    """
    rows: List[TablePrivilegeRow] = []
    for privilege in sorted(grant_map, key=lambda item: item.value):
        by_grantee = grant_map[privilege]
        for grantee in sorted(by_grantee):
            for grant in by_grantee[grantee]:
                rows.append(
                    TablePrivilegeRow(
                        table_cat=catalog,
                        table_schem=schema,
                        table_name=table,
                        grantor=grant.grantor,
                        grantee=grantee,
                        privilege=privilege.value,
                        is_grantable="YES" if grant.grantable else "NO",
                    )
                )
    return rows
