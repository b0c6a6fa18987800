"""Prompt text for every language model call."""

import json
from collections.abc import Sequence
from datetime import datetime

from recipe_assistant.domain.chat import ChatMessage
from recipe_assistant.domain.preferences import UserPreferences
from recipe_assistant.domain.recipes import SourceIngredient
from recipe_assistant.domain.tools import ToolResponse
from recipe_assistant.services.intents import RECIPE_QUERY, RECIPE_REQUEST

_REQUEST_LABELS = {
    RECIPE_REQUEST: "New recipe request",
    RECIPE_QUERY: "Recipe query",
}


def meal_type_for_hour(hour: int) -> str:
    """Return the meal most likely being prepared at the given hour."""
    if 6 <= hour < 11:
        return "breakfast"
    if 11 <= hour < 16:
        return "lunch"
    if 16 <= hour < 22:
        return "dinner"
    return "snack"


def format_transcript(messages: Sequence[ChatMessage]) -> str:
    """Render messages as ``role: content`` lines."""
    return "\n".join(f"{m.role}: {m.content}" for m in messages)


def build_summary_prompt(messages: Sequence[ChatMessage]) -> str:
    """Prompt asking for a short summary of a cooking conversation."""
    return f"""Summarize this cooking/recipe conversation concisely. Focus on:
- Key recipes discussed or requested
- Important ingredients mentioned
- Cooking questions and answers
- User preferences or dietary restrictions
- Any specific cooking techniques discussed

Conversation:
{format_transcript(messages)}

Provide a concise summary in 2-3 sentences that captures the main topics and context."""


def build_workflow_system_prompt(
    user_id: str,
    now: datetime,
    preferences: UserPreferences | None,
    ingredients: Sequence[SourceIngredient],
) -> str:
    """System prompt for the streaming assistant workflow."""
    lines = [
        "You are an expert AI cooking assistant. You help users with recipe "
        "suggestions, cooking advice, and culinary questions.",
        "",
        "Current context:",
        f"- User ID: {user_id}",
        f"- Time: {now.strftime('%H:%M')}",
        f"- Has ingredients detected: {bool(ingredients)}",
    ]
    if preferences is not None:
        lines += [
            "",
            "User preferences:",
            f"- Cooking skill: {preferences.cooking_skill_level}",
            f"- Dietary restrictions: {_join(preferences.dietary_restrictions, 'none')}",
            f"- Allergies: {_join(preferences.allergies, 'none')}",
            "- Liked ingredients: "
            f"{_join(preferences.liked_ingredients, 'none specified')}",
            "- Disliked ingredients: "
            f"{_join(preferences.disliked_ingredients, 'none specified')}",
            "- Preferred cuisines: "
            f"{_join(preferences.preferred_cuisines, 'no preference')}",
            "- Available equipment: "
            f"{_join(preferences.available_equipment, 'basic kitchen')}",
            f"- Max cooking time: {preferences.max_cooking_time or 60} minutes",
            f"- Spice level: {preferences.spice_level}",
        ]
    if ingredients:
        lines += ["", "Available ingredients:"]
        lines += [f"- {i.name} ({i.quantity})" for i in ingredients]
    lines += [
        "",
        "Guidelines:",
        "1. Always consider user preferences when making suggestions",
        "2. Avoid ingredients the user is allergic to or dislikes",
        "3. Suggest recipes appropriate for their skill level",
        "4. Respect dietary restrictions",
        "5. Use available equipment when possible",
        "6. Keep cooking times within their preferred range",
        "7. Be conversational and helpful",
        "8. Ask clarifying questions when needed",
        "",
        "Respond naturally and helpfully to the user's request.",
    ]
    return "\n".join(lines)


def build_chat_prompt(  # noqa: PLR0913
    *,
    user_id: str,
    session_id: str,
    now: datetime,
    request_kind: str,
    message: str,
    context_messages: Sequence[ChatMessage],
    session_summary: str | None,
    current_recipes: Sequence[object] | None,
    current_ingredients: Sequence[object] | None,
    recent_recipe_names: Sequence[str],
    tool_catalog: dict[str, dict[str, object]],
) -> str:
    """Prompt for the single-call chat handler, including the tool protocol."""
    sections = [
        "You are an AI cooking assistant for a recipe generation app. You help "
        "users with recipe-related questions and cooking advice.",
        "",
        "Current context:",
        f"- User ID: {user_id}",
        f"- Session ID: {session_id}",
        f"- Time: {now.strftime('%H:%M')}",
        f"- Request type: {_REQUEST_LABELS.get(request_kind, 'General cooking question')}",
    ]
    if session_summary:
        sections += ["", f"Previous conversation summary: {session_summary}"]
    if current_recipes:
        sections += [
            "",
            f"Current recipes on screen: {_to_json(list(current_recipes)[:2])}",
        ]
    if current_ingredients:
        sections += [
            "",
            f"Current ingredients detected: {_to_json(list(current_ingredients))}",
        ]
    if recent_recipe_names:
        sections += [
            "",
            f"User's recent recipes: {', '.join(recent_recipe_names[:3])}",
        ]
    sections += [
        "",
        "TOOL CALLING:",
        "When you need information that is not in the current context, request "
        "exactly one tool instead of answering.",
        "",
        "Available tools:",
    ]
    for name, spec in tool_catalog.items():
        params = spec.get("parameters") or {}
        rendered = ", ".join(f"{k}: {v}" for k, v in params.items()) or "none"  # type: ignore[union-attr]
        sections.append(f"- {name}: {spec['description']} (parameters: {rendered})")
    sections += [
        "",
        "Tool call format:",
        '{"type": "tool_call", "tool": "tool_name", "parameters": {"param": '
        '"value"}, "message": "Explanation of why you need this data"}',
        "",
        "Examples:",
        '- User asks about "yesterday\'s recipe": {"type": "tool_call", "tool": '
        '"get_cooking_history", "parameters": {"days_back": 2}, "message": '
        '"Let me check your recent cooking history"}',
        '- User asks about pasta recipes: {"type": "tool_call", "tool": '
        '"search_recipes", "parameters": {"query": "pasta"}, "message": '
        '"Let me search your pasta recipes"}',
        "",
        "Response types:",
        '1. NEW RECIPE REQUEST: {"type": "recipe_request", "message": "your response"}',
        '2. RECIPE QUERY (about current/previous recipes): {"type": "recipe_query", '
        '"message": "your response"}',
        '3. GENERAL COOKING: {"type": "general", "message": "your response"}',
        "4. NEED MORE DATA: use the tool call format above",
        "",
        "Be conversational, reference the current context when available and "
        "use tools when the user mentions past recipes, preferences or history.",
        "",
        "Recent chat history (last 2 hours):",
        format_transcript(context_messages),
        "",
        f"Current user message: {message}",
        "",
        "Respond with JSON only.",
    ]
    return "\n".join(sections)


def append_tool_result(prompt: str, tool: str, response: ToolResponse) -> str:
    """Extend a chat prompt with the outcome of a tool call."""
    return (
        f"{prompt}\n\nTool Response ({tool}):\n"
        f"Success: {str(response.success).lower()}\n"
        f"Data: {_to_json(response.data)}\n"
        f"Message: {response.message}\n\n"
        "Now respond to the user's message with this additional context. "
        "Respond with JSON only."
    )


def build_recipe_generation_prompt(
    ingredients: Sequence[SourceIngredient],
    now: datetime,
    preferences_text: str,
) -> str:
    """Prompt asking for basic and advanced recipes as JSON."""
    meal_type = meal_type_for_hour(now.hour)
    ingredient_list = ", ".join(f"{i.name} ({i.quantity})" for i in ingredients)
    preference_block = f"\n{preferences_text}\n" if preferences_text else ""
    return f"""You are an expert chef and recipe creator. Based on the detected ingredients and current context, suggest recipes that can be made.

Available Ingredients: {ingredient_list}
Current Time: {now.strftime('%H:%M')}
Suggested Meal Type: {meal_type}
{preference_block}
Return recipe suggestions in this JSON structure:
{{
  "basic_recipes": [
    {{
      "name": "Recipe Name",
      "description": "Brief description of the dish",
      "cooking_time": "30 minutes",
      "difficulty": "Beginner|Intermediate|Professional",
      "servings": 2,
      "ingredients": [
        {{"item": "ingredient name", "amount": "quantity needed", "available": true}}
      ],
      "equipment": ["basic equipment needed"],
      "steps": ["Step 1: Detailed cooking instruction"],
      "tips": ["Helpful cooking tips"],
      "nutrition_highlights": ["Key nutritional benefits"]
    }}
  ],
  "advanced_recipes": [
    {{
      "name": "Advanced Recipe Name",
      "description": "Brief description",
      "cooking_time": "45 minutes",
      "difficulty": "Intermediate|Professional",
      "servings": 2,
      "ingredients": [
        {{"item": "ingredient name", "amount": "quantity needed", "available": false, "substitute": "possible substitute"}}
      ],
      "equipment": ["specialized equipment needed"],
      "steps": ["Detailed professional cooking steps"],
      "tips": ["Advanced cooking techniques"],
      "nutrition_highlights": ["Nutritional information"]
    }}
  ]
}}

Guidelines:
- Basic recipes use common household spices (salt, pepper, oil, garlic) and basic equipment (stove, pan, pot)
- Advanced recipes may need specialized spices, equipment or techniques
- Provide 2-3 recipes in each category, suited to {meal_type}
- Mark ingredients "available": true only if they match the detected ingredients
- Include realistic cooking times and clear difficulty levels
- Don't suggest recipes needing much more than what's available

Return only the JSON response, no additional text."""


def build_detection_prompt(now: datetime) -> str:
    """Prompt asking the vision model to list ingredients in a photo."""
    return f"""You are an expert food ingredient detection AI. Analyze this image and identify all visible food ingredients with their estimated quantities.

Current context:
- Time: {now.strftime('%H:%M')}
- Likely meal type: {meal_type_for_hour(now.hour)}

Return JSON with this structure:
{{
  "ingredients": [
    {{"name": "ingredient name", "quantity": "estimated quantity (e.g. '2 medium', '1 cup')", "confidence": 0.95}}
  ]
}}

Guidelines:
- Only identify food ingredients, not utensils or containers
- Give realistic quantity estimates and confidence scores between 0.0 and 1.0
- Focus on ingredients that can be used for cooking

Return only the JSON response, no additional text."""


def _join(values: Sequence[str], empty: str) -> str:
    return ", ".join(values) if values else empty


def _to_json(value: object) -> str:
    return json.dumps(value, default=str)
