"""Unit tests for notification templates."""

import pytest

from notification_system.domain.models import OperationKind
from notification_system.notifications.models import NotificationTemplateError
from notification_system.notifications.templates import TEMPLATES, TemplateRenderer


@pytest.fixture
def renderer():
    return TemplateRenderer()


def test_every_operation_has_templates():
    assert set(TEMPLATES) == set(OperationKind)


def test_render_creation(renderer):
    rendered = renderer.render(OperationKind.CREATE)

    assert rendered == {
        "subject": "Аккаунт успешно создан",
        "text_body": "Здравствуйте! Ваш аккаунт на сайте ваш сайт был успешно создан.",
    }


def test_render_deletion(renderer):
    rendered = renderer.render(OperationKind.DELETE)

    assert rendered["subject"] == "Аккаунт удалён"
    assert rendered["text_body"] == "Здравствуйте! Ваш аккаунт был удалён."


def test_subject_is_single_line(renderer):
    for operation in OperationKind:
        assert "\n" not in renderer.render(operation)["subject"]


def test_missing_registration_raises():
    renderer = TemplateRenderer(templates={OperationKind.CREATE: TEMPLATES[OperationKind.CREATE]})

    with pytest.raises(NotificationTemplateError, match="No template registered"):
        renderer.render(OperationKind.DELETE)


def test_missing_template_file_raises():
    renderer = TemplateRenderer(
        templates={OperationKind.CREATE: ("does_not_exist.j2", "does_not_exist.j2")}
    )

    with pytest.raises(NotificationTemplateError, match="Template rendering failed"):
        renderer.render(OperationKind.CREATE)
