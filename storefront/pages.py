"""HTML pages rendered with Jinja2 (autoescaped, templates kept in memory)."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from fastapi.responses import HTMLResponse
from jinja2 import DictLoader, Environment, select_autoescape

from .entitlements import EntitlementView
from .provider import PurchaseSummary


TEMPLATES = {
    "base.html": """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{{ title }}</title>
  <style>
    body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif; text-align: center; padding: 40px; background-color: #f8f9fa; color: #333; }
    .container { max-width: 700px; margin: auto; background: #fff; border: 1px solid #ddd; padding: 30px; border-radius: 8px; box-shadow: 0 2px 10px rgba(0,0,0,0.05); }
    h1 { color: #28a745; }
    h1.error { color: #dc3545; }
    a { color: #007bff; text-decoration: none; font-weight: bold; }
    .button { display: inline-block; background-color: #007bff; color: white; padding: 15px 25px; border-radius: 8px; }
    input { padding: 10px; width: 250px; margin-bottom: 20px; border-radius: 5px; border: 1px solid #ccc; }
    button { padding: 10px 20px; background-color: #007bff; color: white; border: none; border-radius: 5px; cursor: pointer; }
    .product-card { border: 1px solid #ddd; border-radius: 8px; padding: 20px; margin-top: 20px; text-align: left; }
  </style>
</head>
<body>
  <div class="container">
{% block content %}{% endblock %}
  </div>
</body>
</html>
""",
    "prompt.html": """{% extends "base.html" %}
{% block content %}
    <h1>Check Your Access</h1>
    <p>Please enter your email to see your purchases.</p>
    <form action="/" method="GET">
      <input type="email" name="email" placeholder="Enter your email" required />
      <br/>
      <button type="submit">Check Access</button>
    </form>
{% endblock %}
""",
    "access.html": """{% extends "base.html" %}
{% block content %}
    <h1>Welcome Back!</h1>
    <p>You have access to the following:</p>
    {% if view.subscription and "subscription" in access %}
    <div class="product-card">
      <h3>Active Subscription</h3>
      <p><strong>Product ID:</strong> {{ view.subscription.product_id or "unknown" }}</p>
      <p><strong>Status:</strong> {{ view.subscription.status.value }}</p>
      <p><strong>Next Billing Date:</strong> {{ view.subscription.next_billing_date | date }}</p>
    </div>
    {% endif %}
    {% for purchase in view.purchases %}
    <div class="product-card">
      <h3>One-Time Purchase</h3>
      <p><strong>Product ID:</strong> {{ purchase.product_id }}</p>
      <p><strong>Purchased On:</strong> {{ purchase.purchased_at | date }}</p>
    </div>
    {% endfor %}
{% endblock %}
""",
    "buy.html": """{% extends "base.html" %}
{% block content %}
    <h1>Welcome, {{ email }}!</h1>
    <p>You do not have any active products or subscriptions.</p>
    <a class="button" href="{{ checkout_href }}">Buy Product Now</a>
{% endblock %}
""",
    "success.html": """{% extends "base.html" %}
{% block content %}
    <h1>Thank You!</h1>
    <p>{{ summary.details }}</p>
    <p>Your access will be granted automatically in just a few moments. A confirmation has been sent to <strong>{{ email }}</strong>.</p>
    <br>
    <a class="button" href="{{ access_href }}">View My Access</a>
{% endblock %}
""",
    "failure.html": """{% extends "base.html" %}
{% block content %}
    <h1 class="error">Payment Not Successful</h1>
    <p>Your payment status is: <strong>{{ status or "unknown" }}</strong>.</p>
    <p>Please check your email or contact support if you believe this is an error.</p>
    <a href="/">&larr; Back to Home</a>
{% endblock %}
""",
}


def _format_date(value: Optional[datetime]) -> str:
    if value is None:
        return "n/a"
    return value.strftime("%Y-%m-%d")


env = Environment(loader=DictLoader(TEMPLATES), autoescape=select_autoescape(["html"]))
env.filters["date"] = _format_date


def render_template(name: str, *, status_code: int = 200, **ctx: Any) -> HTMLResponse:
    tpl = env.get_template(name)
    return HTMLResponse(tpl.render(**ctx), status_code=status_code)


def prompt_page() -> HTMLResponse:
    return render_template("prompt.html", title="Check Access")


def access_page(view: EntitlementView) -> HTMLResponse:
    access = [item.value for item in view.access_type]
    return render_template("access.html", title="Access Granted", view=view, access=access)


def buy_page(email: str, checkout_href: str) -> HTMLResponse:
    return render_template("buy.html", title="Buy Product", email=email, checkout_href=checkout_href)


def success_page(summary: PurchaseSummary, email: str, access_href: str) -> HTMLResponse:
    return render_template(
        "success.html",
        title="Payment Successful",
        summary=summary,
        email=email,
        access_href=access_href,
    )


def failure_page(status: Optional[str]) -> HTMLResponse:
    return render_template("failure.html", status_code=400, title="Payment Failed", status=status)


__all__ = ["access_page", "buy_page", "failure_page", "prompt_page", "render_template", "success_page"]
