#!/usr/bin/env python3
"""HTTP boundary for the generation pipeline."""

import logging
import os
import threading
import time
import uuid

from flask import Flask, jsonify, request

from config.defaults import DEFAULTS
from core.orchestrator import PipelineOrchestrator
from core.state import GenerationRequest, ScopeType
from manager.analyzer import analyze_prompt

logger = logging.getLogger(__name__)

app = Flask(__name__)
orchestrator = PipelineOrchestrator()
history = []
_history_lock = threading.Lock()


def _record(entry):
    """Append to history, dropping the oldest entries past the limit."""
    with _history_lock:
        history.append(entry)
        overflow = len(history) - DEFAULTS["history_limit"]
        if overflow > 0:
            del history[:overflow]


def _parse_request(data):
    """Return (GenerationRequest, None) or (None, error message)."""
    if not isinstance(data, dict):
        return None, "Request body must be a JSON object"
    if not isinstance(data.get("prompt"), str) or not data["prompt"].strip():
        return None, "Missing prompt"
    for key in ("options", "context"):
        if data.get(key) is not None and not isinstance(data[key], dict):
            return None, f"'{key}' must be an object"
    scope = data.get("scope")
    if scope and (not isinstance(scope, str) or scope not in {s.value for s in ScopeType}):
        return None, f"Unknown scope: {scope}"
    options = dict(data.get("options") or {})
    if scope:
        options["scope"] = scope
    return GenerationRequest(
        prompt=data["prompt"].strip(),
        framework=data.get("framework"),
        language=data.get("language"),
        context=dict(data.get("context") or {}),
        session_id=data.get("session_id") or str(uuid.uuid4())[:8],
        options=options,
    ), None


@app.route("/api/generate", methods=["POST"])
def api_generate():
    """Run the pipeline for one request and return the serialized result."""
    gen_request, error = _parse_request(request.get_json(silent=True))
    if error:
        return jsonify({"error": error}), 400

    result = orchestrator.execute(gen_request)
    payload = result.to_dict()
    payload["session_id"] = gen_request.session_id
    payload["prompt"] = gen_request.prompt

    _record({
        "session_id": gen_request.session_id,
        "prompt": gen_request.prompt,
        "success": result.success,
        "scope": result.scope.type.value if result.scope else None,
        "artifacts": [a.path for a in result.artifacts],
        "created": time.time(),
    })
    return jsonify(payload), 200 if result.success else 502


@app.route("/api/classify", methods=["POST"])
def api_classify():
    """Dry run: scope detection without a provider call."""
    gen_request, error = _parse_request(request.get_json(silent=True))
    if error:
        return jsonify({"error": error}), 400

    analysis = analyze_prompt(gen_request)
    scope = orchestrator.classifier.classify(
        gen_request.prompt, analysis, override=gen_request.options.get("scope"),
    )
    payload = scope.to_dict()
    payload["entity"] = analysis.main_entity
    payload["features"] = list(analysis.features)
    payload["dry_run"] = True
    return jsonify(payload)


@app.route("/api/history")
def api_history():
    with _history_lock:
        return jsonify(list(history))


if __name__ == "__main__":
    logging.basicConfig(level=os.environ.get("ARTIFACTFORGE_LOG_LEVEL", "INFO").upper())
    port = int(os.environ.get("PORT", 5001))
    print(f"ArtifactForge running at http://localhost:{port}")
    app.run(debug=False, port=port)
