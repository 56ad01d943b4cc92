# Instruction prompt for voice input parsing
# Sent as a single user message; {transcript} is inserted verbatim
# Priorities: Low, Medium (default), High
# Dates: due_date in ISO format (YYYY-MM-DD) or null
PARSE_PROMPT = """You are a task parser. Extract structured data from this natural language task description.

Input: "{transcript}"

Return ONLY valid JSON with these exact fields:
- title: string (main task, cleaned up, no filler words)
- priority: "Low" | "Medium" | "High"
- due_date: ISO date string (YYYY-MM-DD) or null
- status: "To Do" (always default to this)

Rules:
1. Priority keywords:
   - High: urgent, critical, high priority, important, asap
   - Low: low priority, minor, small, whenever
   - Medium: default
2. Date parsing:
   - today = today's date
   - tomorrow = add 1 day
   - next week = add 7 days
   - in X days = add X days
   - Monday/Tuesday/etc or next Monday/Tuesday/etc = next occurrence of that day after today
   - No date mentioned = null
3. Remove filler phrases like "create a task", "add", "remind me to", "make a task to", "task to"
   and trailing words like "task", "by", "before", "due"
4. Remove priority keywords and date phrases from the title
5. Capitalize first letter of title

Respond with this exact JSON format:
{{
    "title": "task title here",
    "priority": "Low" | "Medium" | "High",
    "due_date": "YYYY-MM-DD" or null,
    "status": "To Do"
}}

Return JSON only, no explanation.

Today's date is: {today}
"""
