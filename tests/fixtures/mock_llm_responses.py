"""
Mock Content-Service Answers and Store Records for Testing

Realistic answers for every prompt template the mediator uses, plus target,
subject and validation records shaped like the ones the pipeline stores.
"""

# =============================================================================
# CONTENT-SERVICE ANSWERS (keyed by template name)
# =============================================================================

MOCK_GENERATE_PATH = {
    "steps": [
        {
            "type": "rename_fields",
            "parameters": {"renames": {"summary": "abstract"}},
            "description": "The synthesize stage calls the summary an abstract",
        },
        {
            "type": "context_merge",
            "parameters": {"values": {"stage": "synthesize"}},
            "description": "Tag the record with its consuming stage",
        },
    ],
    "recommendedStrategy": "structural",
}

MOCK_SEMANTIC_PATH = {
    "steps": [
        {"type": "semantic_transform", "parameters": {"goal": "rewrite as test plan"}},
    ],
    "recommendedStrategy": "semantic",
}

MOCK_SEMANTIC_STEP = {"result": {"plan": ["check login", "check logout"]}}

MOCK_SEMANTIC_VALIDATION_OK = {"valid": True, "issues": []}

MOCK_SEMANTIC_VALIDATION_REJECTED = {
    "valid": False,
    "issues": ["The record does not describe any test cases"],
}

MOCK_FEATURES = {
    "summary": "Login service with password hashing and session tokens",
    "components": ["auth controller", "session store"],
    "features": ["password login", "token refresh"],
    "risks": ["no rate limiting on login"],
}

MOCK_RELATIONSHIP = {
    "coverage": 0.75,
    "covered": ["password login"],
    "gaps": ["account lockout"],
    "alignment_score": 78,
}

MOCK_DIFFERENCES = {
    "semanticChanges": ["summary renamed to abstract"],
    "preserved": ["title", "summary text"],
    "lost": [],
}

MOCK_ANALYSIS = {
    "quality": "good",
    "informationLoss": [],
    "suggestions": ["keep the original field names in metadata"],
}

MOCK_EVALUATION = {
    "semanticPreservation": 92,
    "structuralAdaptability": 85,
    "informationCompleteness": 88,
    "overallQuality": 89,
    "strengths": ["all content preserved"],
    "weaknesses": ["field order changed"],
    "recommendations": ["document the renamed fields"],
}

MOCK_ENRICH = {
    "enrichedData": {
        "title": "Auth flows",
        "related": ["previous login design"],
    },
    "addedContext": ["related design from run 41"],
}

MOCK_RESOLUTION = {
    "resolvedData": {"title": "Sign-in flows", "owner": "platform"},
    "resolutions": [{"field": "title", "choice": "Sign-in flows", "reason": "newer"}],
    "explanation": "Kept the newer title",
    "confidence": 0.9,
}

MOCK_INSIGHTS = {
    "keyInsights": ["Security checks fail most often"],
    "patterns": ["input validation gaps recur"],
    "suggestedActions": ["add validation middleware"],
    "summary": "Mostly security findings",
}

MOCK_OPTIMIZED_PATH = {
    "steps": [{"type": "rename_fields", "parameters": {"renames": {"summary": "abstract"}}}],
    "recommendedStrategy": "structural",
    "changes": ["dropped redundant context merge"],
}

MOCK_USAGE_ANALYSIS = {
    "patterns": ["model -> synthesize dominates"],
    "recommendations": ["raise capacity"],
}

CONTEXT_SCRIPT = {
    "extract_features": MOCK_FEATURES,
    "analyze_relationship": MOCK_RELATIONSHIP,
}


# =============================================================================
# STORE RECORDS
# =============================================================================

TARGET_RECORD = {
    "id": "req-1",
    "kind": "requirements",
    "title": "User login",
    "requirements": ["users log in with a password", "lock account after 5 failures"],
}

SUBJECT_RECORD = {
    "id": "code-1",
    "kind": "code",
    "language": "python",
    "files": ["auth.py", "session.py"],
}


def validation_record(record_id, score, created_at, details=None, improvements=None, status="partial"):
    """Validation record shaped like the ones the validate stage stores."""
    return {
        "id": record_id,
        "kind": "validation",
        "status": status,
        "score": score,
        "created_at": created_at,
        "details": list(details or []),
        "improvements": list(improvements or []),
    }


def failed_detail(message, semantic_insights="", improvement="", status="failed", score=40):
    return {
        "status": status,
        "message": message,
        "score": score,
        "semantic_insights": semantic_insights,
        "improvement": improvement,
    }


VALIDATION_HISTORY = [
    validation_record(
        "val-1", 60, "2026-03-01T10:00:00Z",
        details=[
            failed_detail(
                "Security check failed: SQL injection in login query",
                semantic_insights="Input validation is missing and error handling leaks stack traces",
                improvement="Use parameterized queries",
            ),
            failed_detail("Performance below target on token refresh", status="partial", score=60),
        ],
    ),
    validation_record(
        "val-2", 65, "2026-03-02T10:00:00Z",
        details=[
            failed_detail(
                "Security check failed: SQL injection in login query",
                improvement="Validate all inputs",
            ),
        ],
        improvements=["Add rate limiting"],
    ),
    validation_record(
        "val-3", 70, "2026-03-03T10:00:00Z",
        details=[{"status": "passed", "message": "All functional tests pass", "score": 95}],
        status="passed",
    ),
]
