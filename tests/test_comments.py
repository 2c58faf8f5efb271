# tests/test_comments.py
"""Comment operations: add, list, delete and like toggles."""

import pytest
from fastapi import status

from app.core.errors import Forbidden, NotFound, Unauthenticated, ValidationError
from app.models import Comment, Report
from app.schemas.comment import CommentCreate
from app.services import comments as comment_service
from tests.conftest import session_of


def test_add_comment_over_http(client, report, other_headers, other) -> None:
    response = client.post(
        f"/reports/{report.id}/comments", json={"text": "Still there today"}, headers=other_headers
    )
    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["issue_id"] == report.id
    assert body["author"] == "Bob Other"
    assert body["author_id"] == other.id
    assert body["likes"] == 0
    assert body["liked_by"] == []
    assert body["reply_to"] is None


def test_add_reply_keeps_author_reference(db_session, report, owner, make_comment) -> None:
    reply = make_comment(report, by=owner, text="Thanks, reported to the city", reply_to="Bob Other")
    assert reply.reply_to == "Bob Other"


def test_add_comment_rejects_blank_text(client, report, other_headers, db_session) -> None:
    response = client.post(f"/reports/{report.id}/comments", json={"text": "  "}, headers=other_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert db_session.query(Comment).count() == 0


def test_add_comment_requires_session(db_session, report) -> None:
    with pytest.raises(Unauthenticated):
        comment_service.add_comment(db_session, None, report.id, CommentCreate(text="hi"))


def test_add_comment_to_missing_report(db_session, other) -> None:
    with pytest.raises(NotFound):
        comment_service.add_comment(db_session, session_of(other), 404, CommentCreate(text="hi"))


def test_list_comments_oldest_first(client, report, make_comment) -> None:
    first = make_comment(report, text="first")
    second = make_comment(report, text="second")
    response = client.get(f"/reports/{report.id}/comments")
    assert response.status_code == status.HTTP_200_OK
    assert [c["id"] for c in response.json()] == [first.id, second.id]


def test_list_comments_for_missing_report(client) -> None:
    assert client.get("/reports/5150/comments").status_code == status.HTTP_404_NOT_FOUND


def test_author_deletes_own_comment(client, report, make_comment, other_headers, db_session) -> None:
    comment = make_comment(report)
    response = client.delete(f"/comments/{comment.id}", headers=other_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"success": True}
    assert db_session.query(Comment).count() == 0


def test_other_user_cannot_delete_comment(db_session, report, make_comment, owner) -> None:
    comment = make_comment(report)
    with pytest.raises(Forbidden):
        comment_service.delete_comment(db_session, session_of(owner), comment.id)
    assert db_session.get(Comment, comment.id) is not None


def test_admin_deletes_any_comment(db_session, report, make_comment, admin) -> None:
    comment = make_comment(report)
    comment_service.delete_comment(db_session, session_of(admin), comment.id)
    assert db_session.query(Comment).count() == 0


def test_deleting_comment_leaves_report_untouched(db_session, report, make_comment, other) -> None:
    comment = make_comment(report)
    comment_service.delete_comment(db_session, session_of(other), comment.id)
    db_session.expire_all()
    assert db_session.get(Report, report.id) is not None


def test_delete_missing_comment(client, other_headers) -> None:
    assert client.delete("/comments/8080", headers=other_headers).status_code == status.HTTP_404_NOT_FOUND


def test_delete_comment_requires_session(client, report, make_comment) -> None:
    comment = make_comment(report)
    assert client.delete(f"/comments/{comment.id}").status_code == status.HTTP_401_UNAUTHORIZED


def test_like_toggle_pair_restores_state(client, report, make_comment, owner_headers) -> None:
    comment = make_comment(report)
    liked = client.post(f"/comments/{comment.id}/like", headers=owner_headers).json()
    assert liked == {"id": comment.id, "likes": 1, "liked": True}
    unliked = client.post(f"/comments/{comment.id}/like", headers=owner_headers).json()
    assert unliked == {"id": comment.id, "likes": 0, "liked": False}


def test_likes_match_liked_by_for_any_sequence(db_session, report, make_comment, make_user) -> None:
    comment = make_comment(report)
    users = [make_user(f"Reader {i}") for i in range(3)]
    for idx in [0, 1, 2, 0, 2, 2]:
        updated, _ = comment_service.toggle_comment_like(db_session, session_of(users[idx]), comment.id)
        assert updated.likes == len(updated.liked_by)
    assert updated.liked_by == {users[1].id, users[2].id}


def test_like_missing_comment(db_session, other) -> None:
    with pytest.raises(NotFound):
        comment_service.toggle_comment_like(db_session, session_of(other), 1234)


def test_like_requires_session(client, report, make_comment) -> None:
    comment = make_comment(report)
    assert client.post(f"/comments/{comment.id}/like").status_code == status.HTTP_401_UNAUTHORIZED
