"""AI endpoints: each one validates input, runs a flow and wraps the result
in the success envelope. Fallback results carry ``fallback: true`` and a
warning."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from hirevision.database import get_db
from hirevision.dependencies import get_current_user
from hirevision.flows import assistant, community, interview, jobs, resume
from hirevision.flows.base import FlowResult
from hirevision.models.user import User
from hirevision.routers.users import public_profile
from hirevision.schemas import ai as req_models
from hirevision.schemas.common import Envelope
from hirevision.services.llm_service import llm_service


def require_llm():
    llm_service.ensure_configured()


_deps = [Depends(get_current_user), Depends(require_llm)]

router = APIRouter(prefix="/ai", tags=["ai"], dependencies=_deps)
assistant_router = APIRouter(tags=["ai"], dependencies=_deps)


def _wrap(result: FlowResult, data=None) -> Envelope:
    return Envelope(
        data=result.output if data is None else data,
        fallback=result.fallback,
        warning=result.warning,
    )


@router.post("/resume-analysis", response_model=Envelope, response_model_exclude_none=True)
async def resume_analysis(req: req_models.ResumeAnalysisRequest):
    return _wrap(await resume.analyze_resume(req.resume_text))


@router.post("/candidate-ranking", response_model=Envelope, response_model_exclude_none=True)
async def candidate_ranking(req: req_models.CandidateRankingRequest):
    return _wrap(await resume.rank_candidate(req.job_description, req.candidate_resume))


@router.post("/source-candidates", response_model=Envelope, response_model_exclude_none=True)
async def source_candidates(req: req_models.SourceCandidatesRequest):
    return _wrap(await resume.source_candidates(req.job_description))


@router.post("/skill-matching", response_model=Envelope, response_model_exclude_none=True)
async def skill_matching(req: req_models.SkillMatchingRequest):
    return _wrap(await resume.match_skills(req.candidate_text, req.job_description))


@router.post("/skill-gap", response_model=Envelope, response_model_exclude_none=True)
async def skill_gap(req: req_models.SkillGapRequest):
    skills = [s.strip() for s in req.current_skills if s.strip()]
    return _wrap(await resume.analyze_skill_gap(req.target_role, skills, req.experience))


@router.post("/improve-job-description", response_model=Envelope, response_model_exclude_none=True)
async def improve_job_description(req: req_models.ImproveJobDescriptionRequest):
    result = await jobs.improve_job_description(req.job_description)
    return _wrap(result, {"improved_description": result.output})


@router.post("/interview-questions", response_model=Envelope, response_model_exclude_none=True)
async def interview_questions(req: req_models.InterviewQuestionsRequest):
    return _wrap(await jobs.suggest_interview_questions(req.job_title, req.job_description))


@router.post("/offer-nudge", response_model=Envelope, response_model_exclude_none=True)
async def offer_nudge(req: req_models.OfferNudgeRequest):
    return _wrap(await jobs.offer_nudge(req.job_details, req.candidate_profile))


@router.post("/onboarding-suggestions", response_model=Envelope, response_model_exclude_none=True)
async def onboarding_suggestions(req: req_models.OnboardingRequest):
    return _wrap(await assistant.onboarding_suggestions(req.user_role))


@router.post("/message-suggestions", response_model=Envelope, response_model_exclude_none=True)
async def message_suggestions(req: req_models.MessageSuggestionsRequest):
    history = [m.model_dump() for m in req.conversation_history]
    return _wrap(await assistant.message_suggestions(history, req.latest_message))


@router.post("/generate-report", response_model=Envelope, response_model_exclude_none=True)
async def generate_report(req: req_models.ReportRequest):
    result = await assistant.generate_report(req.report_context, req.report_type)
    return _wrap(result, {"report": result.output})


@router.post("/smart-data-query", response_model=Envelope, response_model_exclude_none=True)
async def smart_data_query(req: req_models.SmartDataQueryRequest):
    return _wrap(await assistant.smart_data_query(req.natural_language_query))


@router.post("/code-analysis", response_model=Envelope, response_model_exclude_none=True)
async def code_analysis(req: req_models.CodeAnalysisRequest):
    return _wrap(await assistant.code_analysis(req.code_snippet, req.language))


@router.post("/voice-coaching-feedback", response_model=Envelope, response_model_exclude_none=True)
async def voice_coaching_feedback(req: req_models.VoiceCoachingRequest):
    result = await interview.voice_coaching_feedback(req.interview_question, req.candidate_answer)
    return _wrap(result, {"feedback": result.output})


@router.post("/answer-feedback", response_model=Envelope, response_model_exclude_none=True)
async def answer_feedback(req: req_models.AnswerFeedbackRequest):
    result = await interview.answer_feedback(req.question, req.answer, req.context)
    return _wrap(result, {"feedback": result.output})


@router.post("/hashtags", response_model=Envelope, response_model_exclude_none=True)
async def hashtags(req: req_models.HashtagRequest):
    return Envelope(data={"hashtags": await community.suggest_hashtags(req.content)})


@router.post("/connection-icebreaker", response_model=Envelope, response_model_exclude_none=True)
async def connection_icebreaker(
    req: req_models.ConnectionIcebreakerRequest,
    db: Session = Depends(get_db),
):
    candidate = db.get(User, req.candidate_id)
    if not candidate:
        raise HTTPException(status_code=404, detail="User not found")
    result = await community.connection_icebreaker(public_profile(candidate))
    return _wrap(result, {"message": result.output})


@router.post("/connection-summary", response_model=Envelope, response_model_exclude_none=True)
async def connection_summary(
    req: req_models.ConnectionSummaryRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    other = db.get(User, req.other_user_id)
    if not other:
        raise HTTPException(status_code=404, detail="User not found")
    result = await community.connection_summary(public_profile(user), public_profile(other))
    return _wrap(result, {"summary": result.output})


@assistant_router.post("/moderate-content", response_model=Envelope, response_model_exclude_none=True)
async def moderate(req: req_models.ModerationRequest):
    return _wrap(await community.moderate_content(req.text))


@assistant_router.post("/voice-interview/chat", response_model=Envelope, response_model_exclude_none=True)
async def voice_interview_chat(req: req_models.VoiceInterviewRequest):
    messages = [m.model_dump() for m in req.messages]
    return _wrap(await interview.interview_turn(messages, req.job_description))


@assistant_router.post("/mock-interview/start", response_model=Envelope, response_model_exclude_none=True)
async def mock_interview_start(req: req_models.MockInterviewStartRequest):
    result = await interview.mock_interview_start(req.job_type)
    return _wrap(result, {"message": result.output, "question_count": 1, "is_complete": False})


@assistant_router.post("/mock-interview/reply", response_model=Envelope, response_model_exclude_none=True)
async def mock_interview_reply(req: req_models.MockInterviewReplyRequest):
    history = [m.model_dump() for m in req.history]
    result = await interview.mock_interview_reply(req.job_type, history, req.answer, req.question_count)
    if result.fallback:
        # The candidate is asked to repeat; the question does not advance.
        count, complete = req.question_count, False
    else:
        count = req.question_count + 1
        complete = req.question_count >= interview.MOCK_INTERVIEW_LENGTH
    return _wrap(result, {"message": result.output, "question_count": count, "is_complete": complete})
