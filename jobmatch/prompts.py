"""Prompt text sent to the AI collaborator."""
from __future__ import annotations

from .models import CandidateProfile, JobPosting
from .skills import SkillSet


def _value(v) -> str:
    return "Not specified" if v is None or str(v).strip() == "" else str(v)


def _job_block(job: JobPosting, job_skills: SkillSet) -> list[str]:
    return [
        "JOB DETAILS:",
        f"Title: {_value(job.title)}",
        f"Description: {_value(job.description)}",
        f"Required Skills: {job_skills.joined()}",
        "",
    ]


def build_score_prompt(
    job: JobPosting,
    job_skills: SkillSet,
    candidate: CandidateProfile,
    candidate_skills: SkillSet,
) -> str:
    lines = [
        "You are an AI job matcher. Your task is to analyze the compatibility between "
        "a job and a candidate's profile. Return a match score between 1 and 100, where "
        "100 is a perfect match. Only return the numeric score as an integer between 1 "
        "and 100, nothing else.",
        "",
        *_job_block(job, job_skills),
        "CANDIDATE DETAILS:",
        f"Skills: {candidate_skills.joined()}",
        f"Field of study: {_value(candidate.major)}",
    ]
    if candidate.resume_text:
        lines.append(f"Resume Content: {candidate.resume_text}")
    lines += [
        "",
        "PLEASE ANALYZE:",
        f"1. Compare the candidate's skills [{candidate_skills.joined()}] "
        f"with the job's required skills [{job_skills.joined()}]",
        "2. Consider the relevance of the candidate's field of study to the job",
        "3. Consider any relevant experience from the resume",
        "4. Return a single number between 1-100 representing the match percentage",
    ]
    return "\n".join(lines)


def build_explanation_prompt(
    job: JobPosting,
    job_skills: SkillSet,
    candidate: CandidateProfile,
    candidate_skills: SkillSet,
    max_chars: int = 1500,
) -> str:
    lines = [
        "You are an AI job matcher. Analyze the compatibility between this job and "
        f"candidate profile. Provide a brief explanation (max {max_chars} characters) of "
        "why they match or don't match. Focus on skills alignment, experience relevance, "
        "and education fit. Be specific about strengths and gaps. Also include a "
        "percentage match score (1-100%) at the end.",
        "",
        *_job_block(job, job_skills),
        "CANDIDATE DETAILS:",
        f"Skills: {candidate_skills.joined()}",
        f"Field of study: {_value(candidate.major)}",
        f"University: {_value(candidate.university)}",
        f"Graduation Year: {_value(candidate.graduation_year)}",
    ]
    if candidate.resume_text:
        lines.append(f"Resume Content: {candidate.resume_text}")
    lines += [
        "",
        "PLEASE PROVIDE:",
        f"1. A detailed analysis of skill match between candidate skills "
        f"[{candidate_skills.joined()}] and job required skills [{job_skills.joined()}]",
        "2. Identify which skills match and which are missing",
        "3. Suggest how the candidate could improve their profile for this job",
        "4. Include a final match percentage (1-100%) at the end",
    ]
    return "\n".join(lines)


def build_skill_analysis_prompt(candidate_skills: SkillSet, job_skills: SkillSet) -> str:
    return "\n".join([
        "You are an AI job matcher. Your task is to analyze the compatibility between a "
        "candidate's skills and job required skills. Provide a detailed analysis of the "
        "match, focusing on strengths and gaps. Be specific about which skills match and "
        "which are missing. Also suggest how the candidate could improve their profile. "
        "Include a final match percentage (1-100%) at the end.",
        "",
        "CANDIDATE SKILLS:",
        candidate_skills.joined(),
        "",
        "JOB REQUIRED SKILLS:",
        job_skills.joined(),
        "",
        "PLEASE PROVIDE:",
        "1. A detailed analysis of skill match between candidate skills and job required skills",
        "2. Identify which skills match and which are missing",
        "3. Suggest how the candidate could improve their profile for this job",
        "4. Include a final match percentage (1-100%) at the end",
    ])
