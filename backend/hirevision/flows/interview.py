"""Interview coaching and mock interview flows."""
from pydantic import BaseModel

from hirevision.flows.base import FlowResult, run_structured_flow, run_text_flow

MOCK_INTERVIEW_OPENING = (
    "Hello! I'm your AI interviewer. Let's start with: "
    "Tell me about yourself and your experience."
)
MOCK_INTERVIEW_RETRY = "I apologize, there was an error. Could you please repeat your answer?"
MOCK_INTERVIEW_LENGTH = 5

_MOCK_CHAT_OPTIONS = {"max_output_tokens": 200, "temperature": 0.7}


class InterviewTurn(BaseModel):
    next_question: str
    assessment: str


async def voice_coaching_feedback(interview_question: str, candidate_answer: str) -> FlowResult:
    prompt = f"""You are an expert interview coach providing feedback to a candidate.
The interview question was: "{interview_question}"
The candidate's answer was: "{candidate_answer}"

Please provide concise, constructive, and actionable feedback on the candidate's answer.
Focus on:
- Strengths: What did they do well?
- Areas for improvement: Where could they enhance their answer (clarity, conciseness, relevance, specific examples)?
- Suggestions: How could they better phrase their answer or what content should they add or remove?

Provide the feedback as a single text string."""
    return await run_text_flow("voice_coaching_feedback", prompt)


async def answer_feedback(question: str, answer: str, context: str | None = None) -> FlowResult:
    context_line = f'Additional Context: "{context}"' if context else ""
    prompt = f"""You are an expert interviewer providing constructive feedback to a candidate.
Analyze the candidate's answer to a given question.
Provide structured feedback with two sections: "Strengths" and "Suggestions".
Focus on clarity, relevance, specificity, and communication skills.
Keep the feedback concise and actionable.

Question: "{question}"
Candidate's Answer: "{answer}"
{context_line}

Example Feedback Format:
Great answer! Here's some feedback:
Strengths:
- Clear communication
- Relevant experience mentioned
Suggestions:
- Add specific metrics or numbers
- Include more concrete examples"""
    return await run_text_flow("answer_feedback", prompt)


async def interview_turn(messages: list[dict], job_description: str) -> FlowResult:
    transcript = "\n".join(
        f"{'Candidate' if m['role'] == 'user' else 'Interviewer'}: {m['content']}"
        for m in messages
    )
    last_answer = messages[-1]["content"] if messages else ""
    prompt = f"""You are an expert AI interviewer. Your goal is to conduct a professional, engaging, and relevant job interview for a role with the following description:
---
Job Description:
{job_description}
---

Here is the conversation history so far:
{transcript}

The candidate's last response was: "{last_answer}"

Based on the job description and the conversation history:
1. Formulate a single, relevant, and insightful follow-up interview question for the candidate.
2. Provide a brief, constructive assessment of the candidate's last response, highlighting strengths and suggesting improvements against the job requirements.

Your output MUST be a JSON object with two fields: "next_question" (string) and "assessment" (string)."""
    return await run_structured_flow(
        "interview_turn",
        prompt,
        InterviewTurn,
        {
            "next_question": "Can you walk me through a recent project you are proud of and your role in it?",
            "assessment": "Assessment is unavailable right now.",
        },
    )


async def mock_interview_start(job_type: str) -> FlowResult:
    prompt = (
        f"You are an expert interviewer conducting a mock interview for a {job_type} position. "
        "Start the interview with a friendly greeting and ask the first relevant question. "
        "Keep responses concise (2-3 sentences max). Ask behavioral and technical questions "
        "appropriate for this role."
    )
    return await run_text_flow("mock_interview_start", prompt, fallback=MOCK_INTERVIEW_OPENING, **_MOCK_CHAT_OPTIONS)


async def mock_interview_reply(
    job_type: str,
    history: list[dict],
    answer: str,
    question_count: int,
) -> FlowResult:
    """Acknowledge the answer and ask the next question, or wrap up once
    ``MOCK_INTERVIEW_LENGTH`` questions have been asked."""
    if question_count >= MOCK_INTERVIEW_LENGTH:
        prompt = (
            f'The candidate answered: "{answer}". This is question {question_count + 1}. '
            "Provide brief feedback on their answer and wrap up the interview with encouraging "
            "closing remarks. Keep it short (2-3 sentences)."
        )
    else:
        prompt = (
            f'The candidate answered: "{answer}". This is question {question_count + 1} of the interview. '
            f"Acknowledge briefly (1 sentence) and ask the next relevant {job_type} interview question. "
            "Keep total response under 3 sentences."
        )
    return await run_text_flow(
        "mock_interview_reply",
        prompt,
        fallback=MOCK_INTERVIEW_RETRY,
        history=history,
        **_MOCK_CHAT_OPTIONS,
    )
