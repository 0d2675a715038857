"""Search and Maps grounding."""

from typing import Any

from google.genai import types

from .base import GeminiTool, ToolError
from .models import GroundingSource, Location, ReviewSnippet, SearchResult

SEARCH_MODEL = "gemini-2.5-flash"


class GroundedSearch(GeminiTool):
    """Answers a query grounded in Google Search or Google Maps.

    Maps mode needs a location; the panel and the CLI pass the one from
    settings (or the user's flags).
    """

    component = "Search"

    def __init__(self, client: Any, location: Location | None = None) -> None:
        super().__init__(client)
        self._location = location

    @property
    def location(self) -> Location | None:
        return self._location

    def set_location(self, location: Location | None) -> None:
        self._location = location

    def build_config(self, mode: str, location: Location | None = None) -> types.GenerateContentConfig:
        if mode == "web":
            return types.GenerateContentConfig(tools=[types.Tool(google_search=types.GoogleSearch())])
        if mode == "maps":
            location = location or self._location
            if location is None:
                raise ToolError("Could not get location for Maps search. Please enable location services.")
            return types.GenerateContentConfig(
                tools=[types.Tool(google_maps=types.GoogleMaps())],
                tool_config=types.ToolConfig(
                    retrieval_config=types.RetrievalConfig(
                        lat_lng=types.LatLng(latitude=location.latitude, longitude=location.longitude)
                    )
                ),
            )
        raise ValueError(f"Unknown search mode: {mode}. Use 'web' or 'maps'.")

    async def search(self, query: str, mode: str = "web", location: Location | None = None) -> SearchResult:
        self._require_text(query, "Query")
        config = self.build_config(mode, location)

        try:
            response = await self._generate(SEARCH_MODEL, query, config)
        except Exception as e:
            self._debug("error", f"Grounded search failed: {e}")
            raise ToolError("Failed to perform search. Please try again.") from e

        sources = parse_sources(response)
        self._debug("info", f"{mode} search returned {len(sources)} source(s)")
        return SearchResult(text=self._extract_text(response), sources=sources, mode=mode)


def parse_sources(response: Any) -> list[GroundingSource]:
    """Grounding chunks of the first candidate as ``GroundingSource`` items."""
    if not response.candidates:
        return []
    metadata = getattr(response.candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources: list[GroundingSource] = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        maps = getattr(chunk, "maps", None)
        if web is not None:
            sources.append(GroundingSource(kind="web", uri=web.uri or "", title=web.title or ""))
        elif maps is not None:
            sources.append(
                GroundingSource(
                    kind="maps",
                    uri=maps.uri or "",
                    title=maps.title or "",
                    review_snippets=_review_snippets(maps),
                )
            )
    return sources


def _review_snippets(maps: Any) -> list[ReviewSnippet]:
    answer_sources = getattr(maps, "place_answer_sources", None)
    snippets = getattr(answer_sources, "review_snippets", None) or []
    return [
        ReviewSnippet(
            uri=getattr(snippet, "google_maps_uri", None) or getattr(snippet, "uri", None) or "",
            title=getattr(snippet, "title", None) or "",
            snippet=getattr(snippet, "text", None) or "",
        )
        for snippet in snippets
    ]
