"""Crisis Detection HTTP handler.

Every user message should pass through /detect before the chat reply is
generated, so a crisis verdict can replace or accompany the normal reply.

Identifiers are hashed with hash_pii() before they reach the logs.
"""
import asyncio
import logging
import os
from typing import Optional

from flask import Flask, jsonify, request

from nafsy.shared.models import ConversationContext, Language, Severity
from nafsy.shared.utils import configure_pii_salt, hash_pii
from nafsy.services.llm_service import BaseLLM, LLMConfig, LLMProvider, create_llm
from .config import CrisisDetectionConfig
from .engine import SCANNER_ERROR_INDICATOR, CrisisDetectionEngine, should_suppress_chat
from .merger import default_actions

logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)

# Configure PII salt from environment
pii_salt = os.getenv("PII_HASH_SALT", "default_dev_salt_change_in_production_32chars")
configure_pii_salt(pii_salt)

config = CrisisDetectionConfig.from_env()


def _build_llm() -> Optional[BaseLLM]:
    """Completion client from environment; None disables the AI layer."""
    if not config.ai_enabled:
        return None

    provider_name = os.getenv("CRISIS_AI_PROVIDER", LLMProvider.OPENAI.value).lower()
    try:
        provider = LLMProvider(provider_name)
    except ValueError:
        logger.warning("CRISIS_AI_PROVIDER_UNKNOWN", extra={"provider": provider_name})
        return None

    api_key = os.getenv("OPENAI_API_KEY")
    endpoint = os.getenv("CRISIS_AI_ENDPOINT")
    if provider == LLMProvider.OPENAI and not api_key:
        logger.info("CRISIS_AI_DISABLED", extra={"reason": "no_api_key"})
        return None
    if provider == LLMProvider.HTTP and not endpoint:
        logger.info("CRISIS_AI_DISABLED", extra={"reason": "no_endpoint"})
        return None

    return create_llm(LLMConfig(
        provider=provider,
        model_name=os.getenv("CRISIS_AI_MODEL", "gpt-4o-mini"),
        endpoint=endpoint,
        api_key=api_key,
        timeout_seconds=config.ai_timeout_seconds,
    ))


engine = CrisisDetectionEngine(config=config, llm=_build_llm())


@app.route("/health", methods=["GET"])
def health():
    """Health check endpoint.

    Returns:
        200 with service status
    """
    return jsonify({
        "status": "healthy",
        "service": "crisis-detection",
        "lexicon_version": config.lexicon_version,
    }), 200


@app.route("/ready", methods=["GET"])
def ready():
    """Readiness check - verifies the engine is initialized.

    Returns:
        200 if ready, 503 if not
    """
    if engine is None:
        return jsonify({"status": "not_ready", "reason": "engine_not_initialized"}), 503
    return jsonify({"status": "ready"}), 200


@app.route("/detect", methods=["POST"])
def detect():
    """Screen a message for crisis signals.

    Request Body:
        {
            "message": "User message text",
            "language": "en" | "ar" (optional, detected when missing),
            "user_id": "user_123" (optional),
            "conversation_id": "conv_456" (optional),
            "country": "SA" (optional),
            "recent_messages": ["earlier turn", ...] (optional),
            "compose": true (optional)
        }

    Response:
        {
            "isCrisis": true | false,
            "severity": "low" | "medium" | "high" | "critical",
            "indicators": [...],
            "suggestedActions": [...],
            "resources": [...] (only when looked up),
            "metadata": {isEmergency, language, crisisSeverity, crisisIndicators},
            "suppressChat": true | false,
            "response": "..." (only if compose and isCrisis)
        }

    Error Handling:
        On ANY error, returns a medium-severity crisis verdict. The check
        never fails open.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        logger.warning("DETECT_REQUEST_INVALID", extra={"reason": "empty_body"})
        return jsonify({"error": "Request body required"}), 400

    message = data.get("message")
    if message is None or not isinstance(message, str):
        logger.warning("DETECT_REQUEST_INVALID", extra={"reason": "missing_message"})
        return jsonify({"error": "Missing required field: message"}), 400

    language_hint = data.get("language")

    try:
        user_id = data.get("user_id")
        recent = data.get("recent_messages")
        if not isinstance(recent, list):
            recent = []
        context = ConversationContext(
            user_id=user_id,
            conversation_id=data.get("conversation_id"),
            country=data.get("country"),
            recent_messages=tuple(m for m in recent if isinstance(m, str)),
        )

        logger.info(
            "DETECT_REQUESTED",
            extra={
                "user_id_hash": hash_pii(user_id) if user_id else None,
                "message_length": len(message),
                "language_hint": language_hint,
            }
        )

        language = engine.resolve_language(message, language_hint)
        analysis = asyncio.run(engine.detect_crisis(message, language, context))

        body = analysis.to_dict()
        body["metadata"] = analysis.to_message_metadata(language)
        body["suppressChat"] = should_suppress_chat(analysis)
        if data.get("compose") and analysis.is_crisis:
            body["response"] = engine.build_safety_reply(analysis, language)
        return jsonify(body), 200

    except Exception as e:
        logger.error(
            "DETECT_ERROR",
            extra={
                "error": str(e),
                "error_type": type(e).__name__,
                "action": "DEFAULTING_TO_MEDIUM",
            }
        )
        language = Language.from_hint(language_hint) or Language.primary()
        return jsonify({
            "isCrisis": True,
            "severity": "medium",
            "indicators": [SCANNER_ERROR_INDICATOR],
            "suggestedActions": default_actions(Severity.MEDIUM, language),
            "suppressChat": True,
            "error": "Scanner error - defaulting to medium",
        }), 200


@app.route("/detect-language", methods=["POST"])
def detect_language():
    """Detect the language of a text.

    Request Body:
        {"text": "..."}

    Response:
        {"language": "en" | "ar"}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get("text"), str):
        return jsonify({"error": "Missing required field: text"}), 400
    return jsonify({"language": engine.detector.detect(data["text"]).value}), 200


@app.route("/resources/emergency", methods=["GET"])
def emergency_resources():
    """List emergency resources for a language and optional country.

    Query Parameters:
        language: "en" | "ar" (defaults to "en")
        country: ISO country code (optional)
    """
    language = Language.from_hint(request.args.get("language")) or Language.primary()
    country = request.args.get("country") or config.default_country
    resources = engine.resource_lookup.get_emergency_resources(
        language,
        country=country,
        limit=config.max_resources,
    )
    return jsonify({
        "language": language.value,
        "country": country,
        "resources": [r.to_dict() for r in resources],
    }), 200


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    port = int(os.getenv("PORT", "8003"))
    logger.info("CRISIS_DETECTION_STARTING", extra={"port": port})

    app.run(host="0.0.0.0", port=port)
