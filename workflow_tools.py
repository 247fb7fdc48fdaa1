"""
GoHighLevel Workflow Tools for the GHL MCP Server

Lists automation workflows so their IDs can be used with
add_contact_to_workflow / remove_contact_from_workflow.

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Requires the workflows.readonly scope.
"""

import logging
from collections import Counter
from typing import Optional

from pydantic import BaseModel

from app.core.tooling import ToolModule, ToolSpec, location_field

logger = logging.getLogger(__name__)


class GetWorkflowsParams(BaseModel):
    locationId: Optional[str] = location_field()


def _workflows_result(data, args):
    workflows = data.get("workflows") or []
    return {
        "success": True,
        "workflows": workflows,
        "message": f"Successfully retrieved {len(workflows)} workflows",
        "metadata": {
            "totalWorkflows": len(workflows),
            "workflowStatuses": dict(Counter(w.get("status") for w in workflows)),
        },
    }


class WorkflowTools(ToolModule):
    family = "workflow"
    subject = "workflow"
    lookup = "get_workflows"

    def build_specs(self):
        return [
            ToolSpec(
                name="get_workflows",
                description="List automation workflows with their status",
                params=GetWorkflowsParams,
                path="/workflows/",
                location="locationId",
                reshape=_workflows_result,
            ),
        ]
