"""
Prompt Composer
===============

Builds the ordered message lists sent to the language model for the
initial, repair and interpretation calls of a chat turn.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Sequence

from data_assistant.extraction import CLOSE_MARKER, OPEN_MARKER
from data_assistant.models import ChatTurn, Role, Row
from data_assistant.schema_context import describe_schema

DEFAULT_HISTORY_WINDOW = 10
DEFAULT_MAX_RESULT_ROWS = 200
DEFAULT_ORGANIZATION = "Ella Rises"

SYSTEM_PROMPT_TEMPLATE = """You are an AI data analyst assistant for {organization}, a nonprofit organization that empowers young women to pursue higher education and STEAM careers.

You help staff understand and analyze the organization's database. You can answer questions about:

**Participants**: demographics, fields of interest, schools, employers, contact information
**Events**: workshops, summits, field trips, mentoring sessions, with dates, locations and capacity
**Registrations**: sign-ups, attendance, check-in times, registration status
**Surveys**: satisfaction, usefulness, instructor and NPS scores, comments
**Milestones**: educational and career achievements
**Donations**: contributions, trends and totals

When a user asks a question:
1. Decide what data is needed
2. Write one PostgreSQL SELECT query (read-only) to retrieve it
3. The query will be executed and the results returned to you
4. Turn the results into a clear natural-language answer with insights and context

QUERY RULES:
- ONLY write SELECT queries (WITH is allowed for CTEs). Never use INSERT, UPDATE, DELETE, DROP, ALTER, CREATE, TRUNCATE, GRANT, REVOKE, EXECUTE or CALL
- Always put double quotes around table and column names
- Table and column names are CamelCase (e.g. "Participant", "ParticipantFirstName")
- DO NOT end the query with a semicolon; the system adds it
- To run a query, output it in exactly this format, with nothing else inside the markers:
  {open_marker}
  SELECT ...
  {close_marker}
- Write only one query per response
- If the question cannot be answered from the available data, say so and suggest alternatives

KEEP QUERIES SIMPLE (complex queries break PostgreSQL type inference):
- Use at most {max_ctes} common table expressions
- Do not nest aggregate functions (no AVG(COUNT(...)); aggregate in a CTE or subquery first)
- Avoid correlated subqueries; use JOINs or GROUP BY instead
- In UNION / UNION ALL every column must have the same type in each SELECT; cast mixed values explicitly, e.g. COUNT(*)::text, "DonationDate"::text
- Prefer JSON aggregation (json_build_object, json_agg, row_to_json) over UNIONs of unrelated reports

DATABASE SCHEMA:
{schema}

RESPONSE FORMATTING:
- Use Markdown: **bold** for key figures, headers for longer answers, bullet or numbered lists, and tables for tabular data
- Give specific numbers, percentages and trends
- Focus on actionable insights that help the organization understand its impact"""

REPAIR_PROMPT_TEMPLATE = """The query failed with this error:

{error}

Fix only the problem named in the error. Do not change what the query is trying to answer. Return the corrected query in the same {open_marker} ... {close_marker} format, without a trailing semicolon."""

INTERPRETATION_PROMPT_TEMPLATE = """Here are the query results ({row_count} rows):

{results}
{truncation_note}
Please provide a clear, insightful response based on these results. Do not include SQL queries in your response."""


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return str(value)


def serialize_rows(rows: Sequence[Row]) -> str:
    """Serialize result rows to indented JSON in executor order."""
    return json.dumps(list(rows), indent=2, default=_json_default)


TRUNCATION_NOTE_TEMPLATE = """
Only the first {shown} of {row_count} rows are shown. Say that the answer covers a subset, and give the total row count.
"""


class PromptComposer:
    """Assembles role-tagged message lists for each model call in a turn."""

    def __init__(
        self,
        schema_description: str | None = None,
        history_window: int = DEFAULT_HISTORY_WINDOW,
        organization: str = DEFAULT_ORGANIZATION,
        max_ctes: int = 3,
        max_result_rows: int = DEFAULT_MAX_RESULT_ROWS,
    ) -> None:
        if history_window < 0:
            raise ValueError("history_window must be non-negative")
        if max_result_rows < 1:
            raise ValueError("max_result_rows must be positive")
        self.history_window = history_window
        self.max_result_rows = max_result_rows
        self.system_prompt = SYSTEM_PROMPT_TEMPLATE.format(
            organization=organization,
            open_marker=OPEN_MARKER,
            close_marker=CLOSE_MARKER,
            max_ctes=max_ctes,
            schema=schema_description or describe_schema(),
        )

    def recent_history(self, history: Iterable[ChatTurn]) -> list[ChatTurn]:
        """Trailing window of the caller's history."""
        turns = list(history)
        if self.history_window == 0:
            return []
        return turns[-self.history_window:]

    def compose_initial(
        self, user_message: str, history: Iterable[ChatTurn] = ()
    ) -> list[ChatTurn]:
        """System instruction, bounded history, then the new user message."""
        return [
            ChatTurn(Role.SYSTEM, self.system_prompt),
            *self.recent_history(history),
            ChatTurn(Role.USER, user_message),
        ]

    def compose_repair(
        self,
        prior_turns: Sequence[ChatTurn],
        assistant_text: str,
        error_message: str,
    ) -> list[ChatTurn]:
        """Carry the failed attempt and its error back to the model."""
        request = REPAIR_PROMPT_TEMPLATE.format(
            error=error_message,
            open_marker=OPEN_MARKER,
            close_marker=CLOSE_MARKER,
        )
        return [
            *prior_turns,
            ChatTurn(Role.ASSISTANT, assistant_text),
            ChatTurn(Role.USER, request),
        ]

    def compose_interpretation(
        self,
        prior_turns: Sequence[ChatTurn],
        assistant_text: str,
        rows: Sequence[Row],
    ) -> list[ChatTurn]:
        """Hand the retrieved rows to the model for a narrative answer."""
        shown = rows[: self.max_result_rows]
        truncation_note = ""
        if len(rows) > len(shown):
            truncation_note = TRUNCATION_NOTE_TEMPLATE.format(shown=len(shown), row_count=len(rows))
        request = INTERPRETATION_PROMPT_TEMPLATE.format(
            row_count=len(rows),
            results=serialize_rows(shown),
            truncation_note=truncation_note,
        )
        return [
            *prior_turns,
            ChatTurn(Role.ASSISTANT, assistant_text),
            ChatTurn(Role.USER, request),
        ]
