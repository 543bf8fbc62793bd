"""授权守卫单元测试。"""
import pytest

from app.core.exceptions import AuthenticationRequiredError, UnauthorizedError
from app.core.guard import POLICY, Predicate, authorize, check, require_authenticated
from app.models.user import User


def user(id_: int, role: str = "user") -> User:
    return User(id=id_, email=f"u{id_}@test.com", name="U", hashed_password="x", role=role, verified=True)


class TestCheck:
    def test_no_caller_fails_everything(self):
        for predicate in Predicate:
            assert check(predicate, None, owner_id=1) is False

    def test_non_admin(self):
        assert check(Predicate.NON_ADMIN, user(1))
        assert not check(Predicate.NON_ADMIN, user(2, "admin"))

    def test_admin(self):
        assert check(Predicate.ADMIN, user(2, "admin"))
        assert not check(Predicate.ADMIN, user(1))

    def test_owner_or_admin(self):
        assert check(Predicate.OWNER_OR_ADMIN, user(1), owner_id=1)
        assert not check(Predicate.OWNER_OR_ADMIN, user(1), owner_id=3)
        assert not check(Predicate.OWNER_OR_ADMIN, user(1), owner_id=None)
        assert check(Predicate.OWNER_OR_ADMIN, user(2, "admin"), owner_id=3)


class TestAuthorize:
    def test_returns_caller(self):
        caller = user(7)
        assert authorize("addFeedback", caller) is caller

    def test_missing_caller_is_authentication_error(self):
        with pytest.raises(AuthenticationRequiredError):
            authorize("me", None)

    def test_admin_cannot_add_feedback(self):
        with pytest.raises(UnauthorizedError) as exc_info:
            authorize("addFeedback", user(2, "admin"))
        assert exc_info.value.status_code == 403

    def test_owner_rule(self):
        authorize("deleteFeedback", user(1), owner_id=1)
        with pytest.raises(UnauthorizedError):
            authorize("deleteFeedback", user(1), owner_id=2)

    @pytest.mark.parametrize("operation", ["addProduct", "updateProduct", "deleteProduct",
                                           "updateUser", "deleteUser", "listUsers", "listAuditLogs"])
    def test_admin_only_operations(self, operation):
        assert POLICY[operation] is Predicate.ADMIN
        with pytest.raises(UnauthorizedError):
            authorize(operation, user(1))

    def test_unknown_operation(self):
        with pytest.raises(KeyError):
            authorize("dropDatabase", user(2, "admin"))

    def test_require_authenticated(self):
        with pytest.raises(AuthenticationRequiredError):
            require_authenticated(None)
        assert require_authenticated(user(1)).id == 1
