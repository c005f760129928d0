"""
Role-policy resolver.

Maps a role onto the single export path it may use. Pure: no I/O, no
state, safe to call anywhere.
"""

from typing import Mapping, Optional, Union

from shared.models import Role

from .exceptions import ExportNotAvailableError, UnknownRoleError
from .models import ExportPath

# School admins are deliberately absent: no export path has been defined
# for them yet.
EXPORT_POLICY: Mapping[Role, ExportPath] = {
    Role.SUPER_ADMIN: ExportPath.DIRECT,
    Role.MANAGER: ExportPath.OTP_GATED,
    Role.FIELD_WORKER: ExportPath.REQUEST_APPROVAL,
}


def resolve_export_path(
    role: Union[Role, str],
    policy: Optional[Mapping[Role, ExportPath]] = None,
) -> ExportPath:
    """
    Return the export path for a role.

    Args:
        role: A Role or its string form ("manager", "super-admin", ...)
        policy: Override for the default policy table

    Raises:
        UnknownRoleError: If the role is not a known role
        ExportNotAvailableError: If the role has no export path
    """
    try:
        parsed = Role.parse(role)
    except ValueError:
        raise UnknownRoleError(str(role))

    table = EXPORT_POLICY if policy is None else policy
    if parsed not in table:
        raise ExportNotAvailableError(parsed.value)
    return table[parsed]
