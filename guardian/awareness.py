"""
Awareness board: internal security and privacy training posts.

Posts are short Markdown articles grouped by category. A post may carry one
multiple-choice quiz; answers are tallied so the dashboard can report how
well the staff is doing instead of a fixed figure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from guardian.ids import new_id, now_iso

QUIZ_OPTION_COUNT = 4


class AwarenessCategory(str, Enum):
    SECURITY = "Information Security"
    PRIVACY_CULTURE = "Privacy Culture"
    GOVERNANCE = "Governance & Policies"
    COMPLIANCE = "LGPD Compliance"


@dataclass
class Quiz:
    question: str
    options: List[str]
    correct_answer_index: int
    explanation: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Quiz":
        """Build a quiz from form or model output; accepts camelCase keys."""
        index = data.get("correct_answer_index", data.get("correctAnswerIndex"))
        quiz = cls(
            question=str(data["question"]).strip(),
            options=[str(o).strip() for o in data["options"]],
            correct_answer_index=int(index),
            explanation=str(data.get("explanation") or "").strip(),
        )
        quiz.validate()
        return quiz

    def validate(self) -> None:
        if not self.question:
            raise ValueError("Quiz question is required")
        if len(self.options) != QUIZ_OPTION_COUNT or not all(self.options):
            raise ValueError(f"A quiz needs exactly {QUIZ_OPTION_COUNT} non-empty options")
        if not 0 <= self.correct_answer_index < QUIZ_OPTION_COUNT:
            raise ValueError("Correct answer index out of range")


@dataclass
class QuizResult:
    correct: bool
    correct_index: int
    explanation: str


@dataclass
class AwarenessPost:
    id: str
    tenant_id: str
    title: str
    content: str
    category: AwarenessCategory
    is_published: bool = True
    view_count: int = 0
    date: str = field(default_factory=now_iso)
    quiz: Optional[Quiz] = None
    quiz_attempts: int = 0
    quiz_correct: int = 0


class AwarenessBoard:
    """In-memory list of awareness posts, newest first."""

    def __init__(self) -> None:
        self.posts: List[AwarenessPost] = []

    def __iter__(self):
        return iter(self.posts)

    def __len__(self) -> int:
        return len(self.posts)

    def add_post(
        self,
        tenant_id: str,
        title: str,
        content: str,
        category: AwarenessCategory,
        quiz: Optional[Quiz] = None,
        is_published: bool = True,
    ) -> AwarenessPost:
        if not title or not title.strip():
            raise ValueError("Title is required")
        if quiz is not None:
            quiz.validate()
        post = AwarenessPost(
            id=new_id(),
            tenant_id=tenant_id,
            title=title.strip(),
            content=content,
            category=AwarenessCategory(category),
            is_published=is_published,
            quiz=quiz,
        )
        self.posts.insert(0, post)
        return post

    def get(self, post_id: str) -> AwarenessPost:
        for post in self.posts:
            if post.id == post_id:
                return post
        raise KeyError(post_id)

    def delete_post(self, post_id: str) -> None:
        self.posts = [p for p in self.posts if p.id != post_id]

    def set_published(self, post_id: str, published: bool) -> AwarenessPost:
        post = self.get(post_id)
        post.is_published = published
        return post

    def filter(self, category: Optional[AwarenessCategory] = None, published_only: bool = False) -> List[AwarenessPost]:
        posts = self.posts
        if category is not None:
            category = AwarenessCategory(category)
            posts = [p for p in posts if p.category == category]
        if published_only:
            posts = [p for p in posts if p.is_published]
        return list(posts)

    def record_view(self, post_id: str) -> AwarenessPost:
        post = self.get(post_id)
        post.view_count += 1
        return post

    def answer_quiz(self, post_id: str, option_index: int) -> QuizResult:
        post = self.get(post_id)
        if post.quiz is None:
            raise ValueError("This post has no quiz")
        if not 0 <= option_index < len(post.quiz.options):
            raise ValueError("Option out of range")
        correct = option_index == post.quiz.correct_answer_index
        post.quiz_attempts += 1
        if correct:
            post.quiz_correct += 1
        return QuizResult(
            correct=correct,
            correct_index=post.quiz.correct_answer_index,
            explanation=post.quiz.explanation,
        )

    def awareness_level(self) -> Optional[float]:
        """Percentage of correct quiz answers across all posts, ``None`` before any attempt."""
        attempts = sum(p.quiz_attempts for p in self.posts)
        if not attempts:
            return None
        return sum(p.quiz_correct for p in self.posts) / attempts * 100
