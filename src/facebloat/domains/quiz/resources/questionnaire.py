"""MCP resources for questionnaire discovery."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from fastmcp import FastMCP

if TYPE_CHECKING:
    from facebloat.domains.quiz.domain_logic.models import Questionnaire


def register_questionnaire_resources(mcp: FastMCP, questionnaire: Questionnaire) -> None:
    """Register questionnaire discovery resources on the MCP server."""

    @mcp.resource("quiz://questionnaire")
    def questionnaire_resource() -> str:
        """Questionnaire version, categories, score bands and profile fields."""
        return json.dumps(questionnaire.summary(), indent=2)
