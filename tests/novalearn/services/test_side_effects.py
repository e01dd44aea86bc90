import pytest
from fastapi import BackgroundTasks

from novalearn.services.documents import LocalDocumentStore, discard_documents
from novalearn.services.notifications import NotificationDispatcher, deliver


class RecordingSender:
    def __init__(self):
        self.sent = []

    def notify(self, user_id: int, message: str) -> None:
        self.sent.append((user_id, message))


class BrokenSender:
    def notify(self, user_id: int, message: str) -> None:
        raise RuntimeError('smtp unavailable')


def test_dispatch_without_background_tasks_delivers_immediately() -> None:
    sender = RecordingSender()

    NotificationDispatcher(sender).dispatch(3, 'hello')

    assert sender.sent == [(3, 'hello')]


def test_dispatch_with_background_tasks_defers_delivery() -> None:
    sender = RecordingSender()
    tasks = BackgroundTasks()

    NotificationDispatcher(sender, tasks).dispatch(3, 'hello')

    assert sender.sent == []
    assert len(tasks.tasks) == 1
    task = tasks.tasks[0]
    task.func(*task.args, **task.kwargs)
    assert sender.sent == [(3, 'hello')]


def test_deliver_logs_and_swallows_sender_errors(caplog) -> None:
    deliver(BrokenSender(), 9, 'hello')

    assert 'Failed to deliver notification to user 9' in caplog.text


def test_local_store_round_trip(tmp_path) -> None:
    store = LocalDocumentStore(tmp_path / 'docs')

    reference = store.store(b'%PDF-1.7')

    assert (tmp_path / 'docs' / reference).read_bytes() == b'%PDF-1.7'
    store.delete(reference)
    assert not (tmp_path / 'docs' / reference).exists()


def test_deleting_missing_document_is_a_no_op(tmp_path) -> None:
    LocalDocumentStore(tmp_path).delete('never-stored')


@pytest.mark.parametrize('reference', ['../secrets.txt', 'nested/file.pdf', ''])
def test_path_like_references_are_rejected(tmp_path, reference) -> None:
    with pytest.raises(ValueError):
        LocalDocumentStore(tmp_path).delete(reference)


def test_discard_documents_continues_past_bad_references(tmp_path) -> None:
    store = LocalDocumentStore(tmp_path)
    kept = store.store(b'cv')

    discard_documents(store, ['../escape', kept])

    assert not (tmp_path / kept).exists()
