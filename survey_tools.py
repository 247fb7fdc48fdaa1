"""
GoHighLevel Survey Tools for the GHL MCP Server

Read-only access to surveys and their submissions.

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Requires the surveys.readonly scope.
"""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from app.core.tooling import ToolModule, ToolSpec, location_field

logger = logging.getLogger(__name__)


class GetSurveysParams(BaseModel):
    locationId: Optional[str] = location_field()
    skip: Optional[int] = Field(None, ge=0, description="Number of records to skip for pagination (default: 0)")
    limit: Optional[int] = Field(None, ge=1, le=50, description="Maximum surveys to return (max: 50, default: 10)")
    type: Optional[str] = Field(None, description='Filter surveys by type (e.g., "folder")')


class GetSubmissionsParams(BaseModel):
    locationId: Optional[str] = location_field()
    page: Optional[int] = Field(None, ge=1, description="Page number for pagination (default: 1)")
    limit: Optional[int] = Field(None, ge=1, le=100, description="Submissions per page (max: 100, default: 20)")
    surveyId: Optional[str] = Field(None, description="Filter by specific survey ID")
    q: Optional[str] = Field(None, description="Search by contact ID, name, email, or phone")
    startAt: Optional[str] = Field(None, description="Start date (YYYY-MM-DD format)")
    endAt: Optional[str] = Field(None, description="End date (YYYY-MM-DD format)")


def _surveys_result(data, args):
    surveys = data.get("surveys") or []
    metadata = {
        "totalSurveys": data.get("total"),
        "returnedCount": len(surveys),
        "pagination": {"skip": args["skip"], "limit": args["limit"]},
    }
    if args.get("type"):
        metadata["filterType"] = args["type"]
    return {
        "success": True,
        "surveys": surveys,
        "total": data.get("total"),
        "message": f"Successfully retrieved {len(surveys)} surveys",
        "metadata": metadata,
    }


def _submissions_result(data, args):
    submissions = data.get("submissions") or []
    meta = data.get("meta") or {}
    filters = {
        name: args[key]
        for name, key in (("surveyId", "surveyId"), ("search", "q"), ("startDate", "startAt"), ("endDate", "endAt"))
        if args.get(key)
    }
    return {
        "success": True,
        "submissions": submissions,
        "meta": meta,
        "message": f"Successfully retrieved {len(submissions)} survey submissions",
        "metadata": {
            "totalSubmissions": meta.get("total"),
            "returnedCount": len(submissions),
            "pagination": {
                "currentPage": meta.get("currentPage"),
                "nextPage": meta.get("nextPage"),
                "prevPage": meta.get("prevPage"),
                "limit": args["limit"],
            },
            "filters": filters,
        },
    }


class SurveyTools(ToolModule):
    family = "survey"
    subject = "survey"
    lookup = "get_surveys"

    def build_specs(self):
        return [
            ToolSpec(
                name="get_surveys",
                description="List surveys for the location",
                params=GetSurveysParams,
                path="/surveys/",
                location="locationId",
                defaults={"skip": 0, "limit": 10},
                reshape=_surveys_result,
            ),
            ToolSpec(
                name="get_survey_submissions",
                description="List survey submissions, optionally filtered by survey, contact search or date range",
                params=GetSubmissionsParams,
                path="/surveys/submissions",
                location="locationId",
                defaults={"page": 1, "limit": 20},
                reshape=_submissions_result,
            ),
        ]
