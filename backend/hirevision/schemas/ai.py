from typing import Annotated, Literal

from pydantic import BaseModel, Field, StringConstraints

NonEmpty = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "model"]
    content: str


class ResumeAnalysisRequest(BaseModel):
    resume_text: NonEmpty


class CandidateRankingRequest(BaseModel):
    job_description: NonEmpty
    candidate_resume: NonEmpty


class SourceCandidatesRequest(BaseModel):
    job_description: NonEmpty


class ImproveJobDescriptionRequest(BaseModel):
    job_description: NonEmpty


class InterviewQuestionsRequest(BaseModel):
    job_title: NonEmpty
    job_description: NonEmpty


class SkillMatchingRequest(BaseModel):
    candidate_text: NonEmpty
    job_description: NonEmpty


class SkillGapRequest(BaseModel):
    target_role: NonEmpty
    current_skills: list[str] = []
    experience: str | None = None


class OnboardingRequest(BaseModel):
    user_role: Literal["candidate", "recruiter"]


class MessageSuggestionsRequest(BaseModel):
    conversation_history: list[ChatMessage]
    latest_message: NonEmpty


class OfferNudgeRequest(BaseModel):
    job_details: NonEmpty
    candidate_profile: NonEmpty


class ReportRequest(BaseModel):
    report_context: NonEmpty
    report_type: NonEmpty


class SmartDataQueryRequest(BaseModel):
    natural_language_query: NonEmpty


class CodeAnalysisRequest(BaseModel):
    code_snippet: NonEmpty
    language: NonEmpty


class VoiceCoachingRequest(BaseModel):
    interview_question: NonEmpty
    candidate_answer: NonEmpty


class AnswerFeedbackRequest(BaseModel):
    question: NonEmpty
    answer: NonEmpty
    context: str | None = None


class ConnectionIcebreakerRequest(BaseModel):
    candidate_id: str


class ConnectionSummaryRequest(BaseModel):
    other_user_id: str


class ModerationRequest(BaseModel):
    text: NonEmpty


class VoiceInterviewRequest(BaseModel):
    messages: list[ChatMessage] = Field(min_length=1)
    job_description: NonEmpty


class MockInterviewStartRequest(BaseModel):
    job_type: NonEmpty


class MockInterviewReplyRequest(BaseModel):
    job_type: NonEmpty
    history: list[ChatMessage] = []
    answer: NonEmpty
    question_count: int = Field(ge=0)


class TextToSpeechRequest(BaseModel):
    text: str = Field(min_length=1, max_length=5000)
    voice_id: str | None = None


class HashtagRequest(BaseModel):
    content: NonEmpty
