from __future__ import annotations

PERSONAL_INFO_PROMPT = """
You are a resume analysis expert. Extract the candidate's personal information
from the resume below. Reply with plain JSON only, without markdown code fences.

Resume:
{resume_text}

Return strict JSON with this shape:
{{
  "name": "full name",
  "email": "email address",
  "phone": "phone number",
  "location": "city or address of residence",
  "languages": [
    {{"language": "language name", "level": "proficiency"}}
  ],
  "education": [
    {{
      "degree": "degree level",
      "major": "field of study",
      "school": "school name",
      "graduation_year": "year",
      "gpa": "GPA"
    }}
  ],
  "experience": [
    {{
      "company": "company name",
      "position": "job title",
      "duration": "time in role",
      "start_date": "start date",
      "end_date": "end date",
      "description": "role description",
      "skills": ["skill 1", "skill 2"],
      "achievements": ["achievement 1", "achievement 2"]
    }}
  ],
  "skills": ["skill list"],
  "summary": "personal summary"
}}

Rules:
- Use null or an empty array when a field is not present in the resume
- language level must be one of: basic, intermediate, advanced, native, professional
- normalize dates to YYYY-MM-DD or YYYY-MM where possible
- include both technical and soft skills
- reply with the JSON object only
""".strip()

RESUME_ANALYSIS_PROMPT = """
You are a professional HR resume analyst. Evaluate the candidate's resume against
the job requirements and the weighted scoring rubric below.

=== Job ===
Description: {job_description}

Detailed requirements: {job_description_detail}

=== Scoring rubric ===
{rubric_text}

=== Candidate resume ===
{resume_text}

=== Extracted candidate information ===
{extracted_info_json}

Reply with plain JSON only, without markdown code fences:
{{
  "matchPercentage": number (0-100),
  "analysis": "detailed assessment (150-300 words)",
  "strengths": ["strength 1 with specifics", "strength 2 with specifics", "strength 3 with specifics"],
  "weaknesses": ["gap 1 with specifics", "gap 2 with specifics", "gap 3 with specifics"],
  "recommendations": [
    "recommendation for the interview or hiring decision",
    "recommendation for the candidate's development",
    "recommendation about fit for the role"
  ]
}}

Scoring principles:
1. Score strictly. The percentage must reflect the real match, not a generous one.
2. Score bands:
   - 90-100: exceptional fit, every requirement met and exceeded
   - 80-89: strong fit, most requirements met with clear highlights
   - 70-79: good fit, core requirements met with room to improve
   - 60-69: partial fit, some requirements met with obvious gaps
   - 50-59: weak fit, few requirements met, substantial gaps
   - 0-49: not a match, most requirements unmet
3. Compute the score as the weighted sum of the categories:
   - technical skills match x its weight
   - experience years and domain relevance x its weight
   - education fit x its weight
   - language ability x its weight
   - soft skills x its weight
4. Deductions:
   - missing required qualifications cost heavily
   - insufficient experience costs moderately
   - mismatched skills cost noticeably
   - only results beyond expectations earn top scores

Reply with the JSON object only.
""".strip()
