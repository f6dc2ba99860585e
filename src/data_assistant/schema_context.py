"""
Schema Descriptor
=================

Static description of the program database given to the language model as
grounding context. Identifiers are case-sensitive CamelCase and must be
double-quoted in PostgreSQL.
"""

# table -> description and ordered columns (name -> (type, note))
SCHEMA: dict[str, dict] = {
    "Participant": {
        "description": "Program participants (young women in the program).",
        "columns": {
            "ParticipantID": ("integer", "primary key, auto-increment"),
            "ParticipantEmail": ("text", ""),
            "ParticipantFirstName": ("text", ""),
            "ParticipantLastName": ("text", ""),
            "ParticipantDOB": ("date", "date of birth"),
            "ParticipantRole": ("text", "role in the organization"),
            "ParticipantAreaCode": ("integer", ""),
            "ParticipantPhone": ("text", ""),
            "ParticipantCity": ("text", ""),
            "ParticipantState": ("text", ""),
            "ParticipantZip": ("integer", ""),
            "ParticipantFieldOfInterest": ("text", "STEAM field of interest"),
        },
    },
    "School": {
        "description": "Schools that participants attend.",
        "columns": {
            "SchoolID": ("integer", "primary key, auto-increment"),
            "SchoolName": ("text", ""),
        },
    },
    "ParticipantSchool": {
        "description": "Junction table linking participants to schools (many-to-many).",
        "columns": {
            "ParticipantSchoolID": ("integer", "primary key, auto-increment"),
            "ParticipantID": ("integer", 'foreign key -> "Participant"."ParticipantID"'),
            "SchoolID": ("integer", 'foreign key -> "School"."SchoolID"'),
        },
    },
    "Employer": {
        "description": "Employers where participants work.",
        "columns": {
            "EmployerID": ("integer", "primary key, auto-increment"),
            "EmployerName": ("text", ""),
        },
    },
    "ParticipantEmployer": {
        "description": "Junction table linking participants to employers (many-to-many).",
        "columns": {
            "ParticipantEmployerID": ("integer", "primary key, auto-increment"),
            "ParticipantID": ("integer", 'foreign key -> "Participant"."ParticipantID"'),
            "EmployerID": ("integer", 'foreign key -> "Employer"."EmployerID"'),
        },
    },
    "EventFrequency": {
        "description": "Recurrence patterns for events.",
        "columns": {
            "EventFrequencyID": ("integer", "primary key, auto-increment"),
            "EventRecurrencePattern": ("text", "Weekly, Monthly, One-time, Annual"),
        },
    },
    "EventDetails": {
        "description": "Event templates: name, type and description.",
        "columns": {
            "EventDetailsID": ("integer", "primary key, auto-increment"),
            "EventName": ("text", ""),
            "EventType": ("text", "Workshop, Field Trip, Summit, Mentoring Session"),
            "EventDescription": ("text", ""),
            "EventRecurrencePattern": ("text", ""),
            "EventDefaultCapacity": ("integer", ""),
            "EventFrequencyID": ("integer", 'foreign key -> "EventFrequency"."EventFrequencyID"'),
        },
    },
    "Event": {
        "description": "Scheduled event instances with dates and locations.",
        "columns": {
            "EventID": ("integer", "primary key, auto-increment"),
            "EventDetailsID": ("integer", 'foreign key -> "EventDetails"."EventDetailsID"'),
            "EventDateTimeStart": ("timestamp without time zone", ""),
            "EventDateTimeEnd": ("timestamp without time zone", ""),
            "EventLocation": ("text", ""),
            "EventCapacity": ("integer", ""),
            "EventRegistrationDeadline": ("timestamp without time zone", ""),
        },
    },
    "Registration": {
        "description": "Event registrations and attendance.",
        "columns": {
            "RegistrationID": ("integer", "primary key, auto-increment"),
            "ParticipantID": ("integer", 'foreign key -> "Participant"."ParticipantID"'),
            "EventID": ("integer", 'foreign key -> "Event"."EventID"'),
            "RegistrationStatus": ("text", "Registered, Waitlisted, Cancelled, Confirmed"),
            "RegistrationAttendedFlag": ("integer", "0 = did not attend, 1 = attended"),
            "RegistrationCheckInTime": ("timestamp without time zone", ""),
            "RegistrationCreatedAt": ("timestamp without time zone", "when the registration was created"),
        },
    },
    "Survey": {
        "description": "Post-event feedback surveys (NPS-style scoring).",
        "columns": {
            "SurveyID": ("integer", "primary key, auto-increment"),
            "ParticipantID": ("integer", 'foreign key -> "Participant"."ParticipantID"'),
            "EventID": ("integer", 'foreign key -> "Event"."EventID"'),
            "SurveySatisfactionScore": ("double precision", "satisfaction with the event"),
            "SurveyUsefulnessScore": ("double precision", "usefulness of the content"),
            "SurveyInstructorScore": ("double precision", "instructor quality"),
            "SurveyRecommendationScore": ("double precision", "likelihood to recommend"),
            "SurveyOverallScore": ("double precision", ""),
            "SurveyNPSBucket": ("text", "Promoter, Passive or Detractor"),
            "SurveyComments": ("text", ""),
            "SurveySubmissionDate": ("timestamp without time zone", ""),
        },
    },
    "Milestone": {
        "description": "Achievements reached by participants.",
        "columns": {
            "MilestoneID": ("integer", "primary key, auto-increment"),
            "ParticipantID": ("integer", 'foreign key -> "Participant"."ParticipantID"'),
            "MilestoneNo": ("integer", "sequence number for this participant"),
            "MilestoneTitle": ("text", ""),
            "MilestoneDate": ("date", ""),
        },
    },
    "Donation": {
        "description": "Financial donations to the organization.",
        "columns": {
            "DonationID": ("integer", "primary key, auto-increment"),
            "ParticipantID": ("integer", 'nullable foreign key -> "Participant"."ParticipantID"'),
            "DonationNo": ("integer", "sequential donation number"),
            "DonationDate": ("date", ""),
            "DonationAmount": ("numeric(10,2)", ""),
            "TotalDonations": ("numeric(10,2)", "running total"),
        },
    },
}

QUERY_PATTERNS: list[tuple[str, str]] = [
    ("Total participants", 'SELECT COUNT(*) FROM "Participant"'),
    ("Total donations", 'SELECT SUM("DonationAmount") FROM "Donation"'),
    (
        "Confirmed registrations",
        'SELECT COUNT(*) FROM "Registration" WHERE "RegistrationStatus" = \'Confirmed\'',
    ),
    (
        "Participants with schools",
        'SELECT * FROM "Participant" p\n'
        'JOIN "ParticipantSchool" ps ON p."ParticipantID" = ps."ParticipantID"\n'
        'JOIN "School" s ON ps."SchoolID" = s."SchoolID"',
    ),
    (
        "Participants with employers",
        'SELECT * FROM "Participant" p\n'
        'JOIN "ParticipantEmployer" pe ON p."ParticipantID" = pe."ParticipantID"\n'
        'JOIN "Employer" e ON pe."EmployerID" = e."EmployerID"',
    ),
    (
        "Events with details",
        'SELECT * FROM "Event" e\n'
        'JOIN "EventDetails" ed ON e."EventDetailsID" = ed."EventDetailsID"',
    ),
    (
        "Survey responses with events",
        'SELECT * FROM "Survey" s\n'
        'JOIN "Event" e ON s."EventID" = e."EventID"\n'
        'JOIN "EventDetails" ed ON e."EventDetailsID" = ed."EventDetailsID"',
    ),
    (
        "Monthly event counts",
        'SELECT DATE_TRUNC(\'month\', "EventDateTimeStart") AS month, COUNT(*)\n'
        'FROM "Event" GROUP BY 1 ORDER BY 1',
    ),
    (
        "Donations per year",
        'SELECT EXTRACT(YEAR FROM "DonationDate") AS year, SUM("DonationAmount")\n'
        'FROM "Donation" GROUP BY 1 ORDER BY 1',
    ),
    (
        "Attendance rate",
        'SELECT SUM(CASE WHEN "RegistrationAttendedFlag" = 1 THEN 1 ELSE 0 END)::float\n'
        '       / COUNT(*) AS attendance_rate\n'
        'FROM "Registration"',
    ),
    (
        "Several metrics at once",
        "SELECT\n"
        '  (SELECT COUNT(*) FROM "Participant") AS total_participants,\n'
        '  (SELECT COUNT(*) FROM "Event") AS total_events,\n'
        '  (SELECT ROUND(AVG("SurveyOverallScore")::numeric, 2) FROM "Survey") AS avg_score,\n'
        '  (SELECT SUM("DonationAmount") FROM "Donation") AS total_donations',
    ),
    (
        "Report sections with JSON aggregation",
        "WITH top_titles AS (\n"
        '  SELECT "MilestoneTitle", COUNT(*) AS count FROM "Milestone"\n'
        '  GROUP BY "MilestoneTitle" ORDER BY count DESC LIMIT 5\n'
        ")\n"
        "SELECT json_build_object(\n"
        "  'top_titles', (SELECT json_agg(row_to_json(t)) FROM top_titles t)\n"
        ") AS report",
    ),
    (
        "UNION with consistent types",
        "SELECT 'Participants' AS metric, COUNT(*)::text AS value FROM \"Participant\"\n"
        "UNION ALL\n"
        "SELECT 'Avg satisfaction' AS metric, ROUND(AVG(\"SurveyOverallScore\")::numeric, 2)::text\n"
        'FROM "Survey"',
    ),
]

CONVENTIONS: list[str] = [
    "Table and column names are case-sensitive CamelCase.",
    'PostgreSQL requires double quotes around identifiers: "TableName", "ColumnName".',
    "Dates are DATE, timestamps are TIMESTAMP WITHOUT TIME ZONE.",
    "Money uses NUMERIC(10,2).",
    "Survey scores are double precision.",
    "RegistrationAttendedFlag: 0 = not attended, 1 = attended.",
    'NPS buckets: "Promoter" (9-10), "Passive" (7-8), "Detractor" (0-6).',
    "NPS = (promoters - detractors) / total * 100.",
    'Use EXTRACT(YEAR FROM ...) / DATE_TRUNC(\'month\', ...) for date grouping and NOW() for upcoming vs past events.',
]


def describe_schema(schema: dict[str, dict] = SCHEMA) -> str:
    """Render the schema, query patterns and conventions as Markdown."""
    lines = ["# Database Schema", "", "## Tables"]
    for index, (table, info) in enumerate(schema.items(), start=1):
        lines.append("")
        lines.append(f'### {index}. "{table}"')
        lines.append(info["description"])
        for column, (column_type, note) in info["columns"].items():
            suffix = f" - {note}" if note else ""
            lines.append(f'- "{column}" ({column_type}){suffix}')

    lines += ["", "## Common Query Patterns"]
    for title, sql in QUERY_PATTERNS:
        lines += ["", f"### {title}", "```sql", sql, "```"]

    lines += ["", "## Conventions"]
    lines += [f"- {note}" for note in CONVENTIONS]
    return "\n".join(lines)
