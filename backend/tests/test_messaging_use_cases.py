from __future__ import annotations

import pytest

from digital_pm.domain_errors import NotFound, ValidationError
from digital_pm.models import MessageThread, Notification
from digital_pm.services.task_response_builder import thread_to_response, unread_for_viewer
from digital_pm.use_cases.messaging import (
    list_all_threads_use_case,
    list_for_worker_use_case,
    mark_read_use_case,
    send_message_use_case,
)
from digital_pm.use_cases.task_transitions import assign_task_use_case


def _assign(db, task, worker):
    return assign_task_use_case(
        db=db,
        project_id=task.project_id,
        task_id=task.id,
        worker_id=worker.id,
        assigned_by="Office",
    )


def _send(db, task, sender, text):
    return send_message_use_case(db=db, project_id=task.project_id, task_id=task.id, text=text, sender=sender)


def test_messages_share_one_thread_per_task(db, site) -> None:
    task = site.tasks[0]

    first = _send(db, task, "admin", "Bring the ladder")
    second = _send(db, task, site.alice.id, "On it")

    assert db.query(MessageThread).count() == 1
    assert first.thread_id == second.thread_id
    assert [first.position, second.position] == [0, 1]
    assert first.read is False


def test_worker_message_does_not_notify(db, site) -> None:
    task = site.tasks[0]
    _assign(db, task, site.alice)

    _send(db, task, site.alice.id, "Running late")

    assert db.query(Notification).filter(Notification.type == "message_received").count() == 0


def test_office_message_notifies_the_assignee(db, site) -> None:
    task = site.tasks[0]
    _assign(db, task, site.alice)

    _send(db, task, "admin", "Gate code is 4411")

    notification = db.query(Notification).filter(Notification.type == "message_received").one()
    assert notification.target_worker_id == site.alice.id
    assert notification.title == "New Message from Office"
    assert notification.message == "Office: Gate code is 4411"
    assert notification.priority == "medium"


def test_office_message_on_unassigned_task_does_not_notify(db, site) -> None:
    task = site.tasks[0]

    message = _send(db, task, "admin", "Who can take this one?")

    assert message.position == 0
    assert db.query(Notification).count() == 0


def test_mark_read_skips_the_readers_own_messages(db, site) -> None:
    task = site.tasks[0]
    _send(db, task, "admin", "Hi")
    _send(db, task, "admin", "Call me")
    _send(db, task, site.alice.id, "Ok")

    updated = mark_read_use_case(db=db, project_id=task.project_id, task_id=task.id, reader_id=site.alice.id)

    assert updated == 2
    thread = db.query(MessageThread).one()
    assert [message.read for message in thread.messages] == [True, True, False]
    assert unread_for_viewer(thread, "admin") == 1
    assert unread_for_viewer(thread, site.alice.id) == 0
    assert mark_read_use_case(db=db, project_id=task.project_id, task_id=task.id, reader_id=site.alice.id) == 0


def test_mark_read_without_thread_or_task(db, site) -> None:
    task = site.tasks[0]

    assert mark_read_use_case(db=db, project_id=task.project_id, task_id=task.id, reader_id="admin") == 0

    with pytest.raises(NotFound):
        mark_read_use_case(db=db, project_id=task.project_id, task_id="missing", reader_id="admin")


def test_empty_text_is_rejected(db, site) -> None:
    with pytest.raises(ValidationError) as exc_info:
        _send(db, site.tasks[0], "admin", "   ")

    assert exc_info.value.details["field"] == "text"
    assert db.query(MessageThread).count() == 0


def test_message_for_unknown_task_is_not_found(db, site) -> None:
    with pytest.raises(NotFound):
        send_message_use_case(db=db, project_id=site.project.id, task_id="missing", text="Hi", sender="admin")


def test_worker_only_sees_threads_of_assigned_tasks(db, site) -> None:
    _assign(db, site.tasks[0], site.alice)
    _assign(db, site.tasks[1], site.bob)
    _send(db, site.tasks[0], "admin", "For Alice")
    _send(db, site.tasks[1], "admin", "For Bob")

    alice_threads = list_for_worker_use_case(db=db, worker_id=site.alice.id)

    assert [thread.task_id for thread in alice_threads] == [site.tasks[0].id]
    assert len(list_all_threads_use_case(db=db)) == 2
    assert list_for_worker_use_case(db=db, worker_id="nobody") == []

    response = thread_to_response(alice_threads[0], viewer_id=site.alice.id)
    assert response.unread_count == 1
    assert [message.text for message in response.messages] == ["For Alice"]
