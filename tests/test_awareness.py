import pytest

from guardian.awareness import AwarenessBoard, AwarenessCategory, Quiz


def make_quiz(correct=2):
    return Quiz("Which is safest?", ["a", "b", "c", "d"], correct, "Because c.")


def make_board():
    board = AwarenessBoard()
    board.add_post("tenant-1", "Passwords", "Use long passwords.", AwarenessCategory.SECURITY, quiz=make_quiz())
    board.add_post("tenant-1", "Consent", "What consent means.", AwarenessCategory.COMPLIANCE, is_published=False)
    return board


def test_add_post_prepends_with_zero_views():
    board = make_board()
    post = board.posts[0]
    assert post.title == "Consent"
    assert post.view_count == 0


def test_filter_by_category_and_published():
    board = make_board()
    assert [p.title for p in board.filter(category=AwarenessCategory.SECURITY)] == ["Passwords"]
    assert [p.title for p in board.filter(published_only=True)] == ["Passwords"]
    assert len(board.filter()) == 2


def test_record_view_and_delete():
    board = make_board()
    post = board.posts[1]
    board.record_view(post.id)
    board.record_view(post.id)
    assert post.view_count == 2
    board.delete_post(post.id)
    with pytest.raises(KeyError):
        board.get(post.id)


def test_answer_quiz_tallies_attempts():
    board = make_board()
    post = board.posts[1]
    assert board.awareness_level() is None

    wrong = board.answer_quiz(post.id, 0)
    right = board.answer_quiz(post.id, 2)
    assert not wrong.correct
    assert right.correct
    assert right.correct_index == 2
    assert right.explanation == "Because c."
    assert board.awareness_level() == 50.0


def test_answer_quiz_errors():
    board = make_board()
    with pytest.raises(ValueError):
        board.answer_quiz(board.posts[0].id, 0)
    with pytest.raises(ValueError):
        board.answer_quiz(board.posts[1].id, 4)


def test_quiz_from_dict_accepts_camel_case():
    quiz = Quiz.from_dict({
        "question": "Q?",
        "options": ["1", "2", "3", "4"],
        "correctAnswerIndex": 3,
        "explanation": "E",
    })
    assert quiz.correct_answer_index == 3


def test_quiz_validation():
    with pytest.raises(ValueError):
        Quiz.from_dict({"question": "Q?", "options": ["1", "2", "3"], "correct_answer_index": 0})
    with pytest.raises(ValueError):
        Quiz.from_dict({"question": "Q?", "options": ["1", "2", "3", "4"], "correct_answer_index": 4})
    with pytest.raises(ValueError):
        AwarenessBoard().add_post("t", "Title", "c", AwarenessCategory.GOVERNANCE, quiz=Quiz("Q", ["a"], 0))
