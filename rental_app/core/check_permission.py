from models.enums import UserRole

from .errors import PermissionDeniedError


class CheckRolePermission:
    async def check_admin(self, current_user):
        if current_user.role != UserRole.ADMIN:
            raise PermissionDeniedError("Access Denied.")

    async def check_property_owner(self, current_user, property_obj):
        if current_user.role == UserRole.ADMIN:
            return
        if property_obj is None or property_obj.owner_id != current_user.id:
            raise PermissionDeniedError("You do not own this property.")

    async def check_self_or_admin(self, current_user, user_id):
        if current_user.role != UserRole.ADMIN and current_user.id != user_id:
            raise PermissionDeniedError("Access Denied.")
