"""HTTP API for users and the manual notification trigger.

Routes are listed in one explicit table and bound to handler objects built
from the services passed to ``create_app``. Handlers are plain functions, so
FastAPI runs them on its worker threads and a retry wait inside the sender
never blocks the event loop.
"""

from contextlib import contextmanager
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from notification_system.domain.models import OperationKind, User
from notification_system.logging import get_logger
from notification_system.notifications.models import InvalidArgumentError
from notification_system.users import (
    DuplicateEmailError,
    UserNotFoundError,
    UserService,
    UserValidationError,
)

from .schemas import NotificationRequest, UserCreateRequest, UserExistsResponse, UserUpdateRequest

logger = get_logger(__name__, component="api")


class NotificationHandlers:
    """``/api/notifications`` endpoints."""

    def __init__(self, sender):
        self.sender = sender

    def send_notification(self, request: Optional[NotificationRequest] = None) -> PlainTextResponse:
        """Run one notify call synchronously.

        A 200 means the attempt sequence finished, not that the mail was delivered.
        """
        if request is None:
            logger.error("Invalid request: request body is missing")
            return _text(status.HTTP_400_BAD_REQUEST, "Email and operationType are required")

        logger.info(
            f"Received notification request: email={request.email}, "
            f"operationType={request.operationType}",
            extra={"event": "api.notification.received"},
        )

        if request.email is None or request.operationType is None:
            logger.error("Invalid request: email and operationType are required")
            return _text(status.HTTP_400_BAD_REQUEST, "Email and operationType are required")

        try:
            operation = OperationKind.parse(request.operationType)
        except ValueError:
            logger.error(f"Invalid operationType: {request.operationType}")
            return _text(
                status.HTTP_400_BAD_REQUEST,
                "Invalid operationType. Supported values: CREATE, DELETE",
            )

        try:
            if operation is OperationKind.CREATE:
                self.sender.send_creation_notification(request.email)
            else:
                self.sender.send_deletion_notification(request.email)
        except InvalidArgumentError as e:
            logger.error(f"Validation error: {e}")
            return _text(status.HTTP_400_BAD_REQUEST, str(e))
        except Exception:
            logger.exception("Error sending notification", extra={"event": "api.notification.error"})
            return _text(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to send notification")

        return _text(status.HTTP_200_OK, "Notification sent successfully")


class UserHandlers:
    """``/api/users`` endpoints; service errors map to 400 / 404, anything else to 500."""

    def __init__(self, user_service: UserService):
        self.user_service = user_service

    def create_user(self, request: UserCreateRequest) -> User:
        with _service_errors("create user"):
            return self.user_service.create_user(request.name, request.email, request.age)

    def list_users(self) -> List[User]:
        with _service_errors("list users"):
            return self.user_service.list_users()

    def get_user(self, user_id: int) -> User:
        with _service_errors("get user", invalid=status.HTTP_404_NOT_FOUND):
            return self.user_service.get_user_by_id(user_id)

    def get_user_by_email(self, email: str) -> User:
        with _service_errors("get user by email", invalid=status.HTTP_404_NOT_FOUND):
            return self.user_service.get_user_by_email(email)

    def user_exists(self, email: str = Query("", description="Address to look up")) -> UserExistsResponse:
        with _service_errors("check user"):
            return UserExistsResponse(exists=self.user_service.user_exists(email))

    def update_user(self, user_id: int, request: UserUpdateRequest) -> User:
        with _service_errors("update user"):
            return self.user_service.update_user(
                user_id, name=request.name, email=request.email, age=request.age
            )

    def delete_user(self, user_id: int) -> Response:
        with _service_errors("delete user", invalid=status.HTTP_404_NOT_FOUND):
            self.user_service.delete_user(user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)


@contextmanager
def _service_errors(action: str, invalid: int = status.HTTP_400_BAD_REQUEST):
    """Translate service exceptions raised inside the block into HTTPException."""
    try:
        yield
    except HTTPException:
        raise
    except UserNotFoundError as e:
        logger.warning(f"Failed to {action}: {e}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except (UserValidationError, DuplicateEmailError) as e:
        logger.error(f"Validation error: {e}")
        raise HTTPException(status_code=invalid, detail=str(e)) from e
    except Exception as e:
        logger.error(f"Error trying to {action}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {action}",
        ) from e


def create_app(user_service: UserService, sender) -> FastAPI:
    """Build the application with every route registered explicitly.

    Args:
        user_service: Service backing ``/api/users``
        sender: NotificationSender backing ``/api/notifications/send``
    """
    app = FastAPI(title="Notification System", version="1.0.0")

    notifications = NotificationHandlers(sender)
    users = UserHandlers(user_service)

    # /exists and /email/... precede /{user_id}
    routes = [
        ("POST", "/api/notifications/send", notifications.send_notification, None, 200),
        ("POST", "/api/users", users.create_user, User, 201),
        ("GET", "/api/users", users.list_users, List[User], 200),
        ("GET", "/api/users/exists", users.user_exists, UserExistsResponse, 200),
        ("GET", "/api/users/email/{email}", users.get_user_by_email, User, 200),
        ("GET", "/api/users/{user_id}", users.get_user, User, 200),
        ("PUT", "/api/users/{user_id}", users.update_user, User, 200),
        ("DELETE", "/api/users/{user_id}", users.delete_user, None, 204),
    ]

    for method, path, endpoint, response_model, status_code in routes:
        app.add_api_route(
            path,
            endpoint,
            methods=[method],
            response_model=response_model,
            status_code=status_code,
        )

    app.add_exception_handler(RequestValidationError, _bad_request)

    logger.info(
        f"HTTP application created with {len(routes)} routes",
        extra={"event": "api.app.created"},
    )
    return app


async def _bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def _text(status_code: int, body: str) -> PlainTextResponse:
    return PlainTextResponse(content=body, status_code=status_code)
