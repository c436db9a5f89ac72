"""
Request and response bodies.

Field names are snake_case in Python and camelCase on the wire, matching what
the mobile client sends and reads.
"""
from __future__ import annotations
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MessageResponse(BaseModel):
	message: str


# ---- Accounts ----

class AccountSummary(CamelModel):
	id: str
	first_name: str
	last_name: str
	email: str


class AccountOut(AccountSummary):
	role: str
	user_level: Optional[str] = None
	evaluate: Optional[bool] = None


class PersonOut(AccountSummary):
	role: str
	followers: List[AccountSummary] = Field(default_factory=list, alias="Followers")
	following: List[str] = Field(default_factory=list, alias="Following")


class PersonResponse(BaseModel):
	person: PersonOut


class FollowingResponse(BaseModel):
	following: List[AccountSummary]


class FollowersResponse(BaseModel):
	followers: List[AccountSummary]


class FollowRequest(CamelModel):
	teacher_id: Optional[str] = None
	student_id: Optional[str] = None


# ---- Progress ----

class WritingStats(CamelModel):
	total_items: int = 0
	correct_items: int = 0
	games_played: int = 0
	high_score: float = 0


class ReadingStats(CamelModel):
	total_items: int = 0
	correct_pronunciations: int = 0
	games_played: int = 0


class WritingProgress(CamelModel):
	word_practice: WritingStats
	sentence_practice: WritingStats


class ReadingProgress(CamelModel):
	word_reading: ReadingStats
	sentence_reading: ReadingStats


class ProgressOut(CamelModel):
	user_id: str
	writing: WritingProgress
	reading: ReadingProgress
	last_updated: datetime


class ProgressResponse(CamelModel):
	user_level: Optional[str] = None
	progress: ProgressOut


class WordPracticeRequest(CamelModel):
	total_words: Optional[int] = None
	correct_words: Optional[int] = None
	score: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)


class SentencePracticeRequest(CamelModel):
	total_sentences: Optional[int] = None
	correct_sentences: Optional[int] = None
	score: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)


class WordReadingRequest(CamelModel):
	total_words: Optional[int] = None
	correct_pronunciations: Optional[int] = None


class SentenceReadingRequest(CamelModel):
	total_sentences: Optional[int] = None
	correct_pronunciations: Optional[int] = None


# ---- Placement ----

class PlacementRequest(BaseModel):
	# The client echoes its cached user object; identity always comes from the token
	user: Optional[Any] = None
	score: float = Field(ge=0, le=10, allow_inf_nan=False)


class LevelResponse(CamelModel):
	message: str
	user_level: str


# ---- Unknown words ----

class UnknownWordItem(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	word: str = Field(min_length=1)
	definition: Optional[str] = None


class UnknownWordsRequest(CamelModel):
	unknown_words: List[UnknownWordItem] = Field(default_factory=list)


class UnknownWordsResponse(CamelModel):
	message: Optional[str] = None
	unknown_words: List[UnknownWordItem]
