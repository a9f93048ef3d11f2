from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from userstyles.matching.domains import PageAddress
from userstyles.matching.engine import evaluate
from userstyles.menu import describe_affected_pages
from userstyles.stylesheet.model import Stylesheet

api_bp = Blueprint("api", __name__)

def _registry():
    return current_app.extensions["registry"]


def _stylesheet_json(stylesheet: Stylesheet, active: bool | None = None) -> dict:
    data = {
        "file_id": stylesheet.file_id,
        "enabled": stylesheet.enabled,
        "affects": describe_affected_pages(stylesheet),
        "blocks": len(stylesheet.rule_blocks),
    }
    if active is not None:
        data["active"] = active
    return data


@api_bp.after_request
def add_cors_headers(response):
    """Allow cross-origin requests to the API."""
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    return response


@api_bp.route("/stylesheets")
def list_stylesheets():
    """List loaded stylesheets, with their state for ``?url=`` if given."""
    url = request.args.get("url")
    stylesheets = _registry().stylesheets
    if url is None:
        return jsonify({"stylesheets": [_stylesheet_json(s) for s in stylesheets]})

    activations = evaluate(stylesheets, PageAddress.from_uri(url))
    active = {a.stylesheet.file_id for a in activations if a.active}
    return jsonify({
        "url": url,
        "stylesheets": [_stylesheet_json(s, s.file_id in active) for s in stylesheets],
    })


@api_bp.route("/reload", methods=["POST"])
def reload_stylesheets():
    """Reload the styles directory."""
    result = _registry().reload()
    return jsonify({
        "loaded": list(result.loaded),
        "failures": [d.to_dict() for d in result.failures],
    })


@api_bp.route("/stylesheets/<path:file_id>/toggle", methods=["POST"])
def toggle_stylesheet(file_id: str):
    """Enable/disable a stylesheet."""
    try:
        enabled = _registry().toggle(file_id)
    except KeyError:
        return jsonify({"error": "not found"}), 404
    return jsonify({"file_id": file_id, "enabled": enabled})


@api_bp.route("/match")
def match():
    """Return the rule blocks that apply to ``?url=``."""
    url = request.args.get("url")
    if not url:
        return jsonify({"error": "url required"}), 400

    address = PageAddress.from_uri(url)
    matches = []
    for activation in evaluate(_registry().stylesheets, address):
        if not activation.active:
            continue
        matches.append({
            "file_id": activation.stylesheet.file_id,
            "predicates": [p.describe() for p in activation.block.predicates],
            "css": activation.block.css,
        })
    return jsonify({"url": url, "domains": list(address.domains), "matches": matches})
