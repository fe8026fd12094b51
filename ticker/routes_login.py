"""
Login page - sign-in form, live EUR/USD ticker card and password reset dialog.
The login form and SSO button are cosmetic; the reset dialog is simulated.
"""

import html
import logging
from string import Template

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from ticker.config import settings
from ticker.schemas.feed import FeedView
from ticker.schemas.reset import ResetOutcome, ResetRequest
from ticker.services.password_reset import submit_password_reset
from ticker.services.presenter import build_feed_view

logger = logging.getLogger(__name__)

router = APIRouter(tags=["login"])

LOGIN_PAGE = Template("""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>ORTEX - Sign in</title>
    <style>
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            margin: 0;
            padding: 20px;
            background: #0b1020;
            color: #e8ecf5;
        }
        .container { max-width: 1100px; margin: 0 auto; }
        .shell { display: grid; grid-template-columns: repeat(auto-fit, minmax(320px, 1fr)); gap: 20px; }
        .card { background: #121a30; border-radius: 14px; padding: 24px; border: 1px solid #223055; }
        .brand { display: flex; gap: 12px; align-items: center; }
        .brand h1 { margin: 0; font-size: 1.6rem; letter-spacing: 1px; }
        .brand p, .sub, .small, .form-sub { color: #8e9ab8; margin: 4px 0; }
        .small { font-size: 0.85rem; }
        .logo { width: 40px; height: 40px; border-radius: 10px; background: linear-gradient(135deg, #00cfff, #4f6bff); }
        .hr { height: 1px; background: #223055; margin: 18px 0; }
        .ticker { background: #0e1528; border-radius: 12px; padding: 16px; border: 1px solid #223055; }
        .ticker-top, .row, .label-row { display: flex; justify-content: space-between; align-items: center; gap: 10px; }
        .status-dot { display: inline-block; width: 10px; height: 10px; border-radius: 50%; background: #c9a227; }
        .status-dot.on { background: #2ecc71; }
        .status-dot.err { background: #e74c3c; }
        .badge { padding: 4px 12px; border-radius: 20px; background: #1d2745; font-size: 0.85rem; }
        .price { font-size: 2rem; font-weight: 700; font-variant-numeric: tabular-nums; }
        .toast { margin-top: 14px; padding: 12px; border-radius: 10px; background: #2a2140; border: 1px solid #4b3a73; }
        .form { display: flex; flex-direction: column; gap: 14px; }
        .field { display: flex; flex-direction: column; gap: 6px; }
        input[type=text], input[type=email], input[type=password], input:not([type]) {
            padding: 10px; border-radius: 8px; border: 1px solid #2c3a63; background: #0e1528; color: inherit;
        }
        .btn { border: none; padding: 10px 20px; border-radius: 8px; cursor: pointer; font-weight: 600; }
        .btn-primary { background: #00cfff; color: #06101f; }
        .btn-ghost { background: transparent; color: inherit; border: 1px solid #2c3a63; }
        .link { background: none; border: none; color: #00cfff; cursor: pointer; padding: 0; }
        .hidden { display: none; }
        .modal-overlay { position: fixed; inset: 0; background: rgba(0, 0, 0, 0.6); display: flex; align-items: center; justify-content: center; }
        .modal { background: #121a30; border-radius: 14px; padding: 20px; width: 420px; border: 1px solid #223055; }
        .modal-head, .modal-actions { display: flex; justify-content: space-between; align-items: center; gap: 10px; }
        .modal-body { display: flex; flex-direction: column; gap: 12px; margin: 14px 0; }
        .icon-btn { background: none; border: none; color: inherit; cursor: pointer; font-size: 1rem; }
    </style>
</head>
<body>
<div class="container">
  <div class="shell">
    <section class="card hero">
      <div class="brand">
        <div class="logo"></div>
        <div>
          <h1>ORTEX</h1>
          <p>Financial information and insights</p>
        </div>
      </div>
      <h2>Sign in to your ORTEX workspace</h2>
      <p class="sub">Live market data while you sign in</p>
      <div class="hr"></div>

      <div class="ticker">
        <div class="ticker-top">
          <div style="display: flex; align-items: center; gap: 10px">
            <span id="feed-dot" class="$dot_class" aria-hidden="true"></span>
            <div>
              <div style="font-weight: 700">EUR/USD (Live)</div>
              <div class="small">Source: TradingEconomics WebSocket feed ($topic)</div>
            </div>
          </div>
          <span id="feed-badge" class="badge">$badge</span>
        </div>
        <div class="row" style="align-items: baseline">
          <div>
            <div class="small">Latest price</div>
            <div id="feed-price" class="price">$price_text</div>
          </div>
          <div style="text-align: right">
            <div class="small">Latest timestamp (local)</div>
            <div id="feed-time" style="font-weight: 650">$local_time</div>
          </div>
        </div>
        <div id="feed-advisory" class="toast $advisory_class">
          <div style="font-weight: 700; margin-bottom: 6px">Heads-up</div>
          <div id="feed-error">$error</div>
        </div>
      </div>
    </section>

    <section class="card">
      <h3 class="form-title">Login</h3>
      <p class="form-sub">Enter your credentials to continue.</p>
      <form class="form" method="POST" action="/login">
        <div class="field">
          <label for="username">Username</label>
          <input id="username" name="username" autocomplete="username" placeholder="e.g. anita" required>
        </div>
        <div class="field">
          <div class="label-row">
            <label for="password">Password</label>
            <button type="button" class="link" id="open-reset">Reset password</button>
          </div>
          <input id="password" name="password" type="password" autocomplete="current-password" placeholder="&bull;&bull;&bull;&bull;&bull;&bull;&bull;&bull;" required>
        </div>
        <div class="row">
          <label class="checkbox"><input type="checkbox" name="rememberMe"> Remember me</label>
          <button class="btn btn-primary" type="submit">Log in</button>
        </div>
      </form>
      <div class="hr"></div>
      <div class="row">
        <button class="btn btn-ghost" type="button" id="sso">Continue with SSO</button>
        <span class="small">Need access? <a href="#" id="support">Contact support</a></span>
      </div>
      <div id="toast" class="toast hidden"></div>
    </section>
  </div>
</div>

<div id="reset-modal" class="modal-overlay hidden" role="dialog" aria-modal="true" aria-label="Reset password">
  <div class="modal">
    <div class="modal-head">
      <h3 class="modal-title">Reset password</h3>
      <button class="icon-btn" id="close-reset" aria-label="Close">&#x2715;</button>
    </div>
    <form id="reset-form">
      <div class="modal-body">
        <div class="helper">Enter your <b>email</b> or <b>username</b>. If your account exists, you'll receive a reset link.</div>
        <div class="field">
          <label for="resetEmail">Email</label>
          <input id="resetEmail" type="email" placeholder="name@company.com">
        </div>
        <div class="field">
          <label for="resetUsername">Username</label>
          <input id="resetUsername" type="text" placeholder="e.g. anita">
        </div>
      </div>
      <div class="modal-actions">
        <button type="button" class="btn btn-ghost" id="cancel-reset">Cancel</button>
        <button type="submit" class="btn btn-primary">Send reset link</button>
      </div>
    </form>
  </div>
</div>

<script>
(function () {
  var TOAST_CLEAR_MS = $toast_clear_ms;

  function byId(id) { return document.getElementById(id); }

  function renderFeed(view) {
    byId("feed-dot").className = view.dot_class;
    byId("feed-badge").textContent = view.badge;
    byId("feed-price").textContent = view.price_text;
    byId("feed-time").textContent = view.local_time;
    byId("feed-error").textContent = view.error || "";
    byId("feed-advisory").classList.toggle("hidden", !view.error);
  }

  var pollTimer = null;
  function poll() {
    if (pollTimer) return;
    pollTimer = setInterval(function () {
      fetch("/feed/snapshot").then(function (r) { return r.json(); }).then(renderFeed).catch(function () {});
    }, 2000);
  }

  function stream() {
    var scheme = location.protocol === "https:" ? "wss://" : "ws://";
    var ws;
    try {
      ws = new WebSocket(scheme + location.host + "/feed/stream");
    } catch (e) {
      poll();
      return;
    }
    ws.onmessage = function (evt) {
      try { renderFeed(JSON.parse(evt.data)); } catch (e) {}
    };
    ws.onclose = function () { poll(); };
  }

  function showToast(text, clearAfterMs) {
    var toast = byId("toast");
    toast.textContent = text;
    toast.classList.toggle("hidden", !text);
    if (clearAfterMs) {
      setTimeout(function () { toast.classList.add("hidden"); }, clearAfterMs);
    }
  }

  var modal = byId("reset-modal");
  function openReset() { modal.classList.remove("hidden"); }
  function closeReset() { modal.classList.add("hidden"); }

  byId("open-reset").addEventListener("click", openReset);
  byId("close-reset").addEventListener("click", closeReset);
  byId("cancel-reset").addEventListener("click", closeReset);
  modal.addEventListener("mousedown", function (e) {
    if (e.target === modal) closeReset();
  });
  window.addEventListener("keydown", function (e) {
    if (e.key === "Escape") closeReset();
  });

  byId("reset-form").addEventListener("submit", function (e) {
    e.preventDefault();
    fetch("/password-reset", {
      method: "POST",
      headers: {"Content-Type": "application/json"},
      body: JSON.stringify({email: byId("resetEmail").value, username: byId("resetUsername").value})
    }).then(function (r) {
      return r.json().then(function (body) { return {ok: r.ok, body: body}; });
    }).then(function (res) {
      showToast(res.body.message);
      if (res.ok) {
        setTimeout(function () {
          closeReset();
          byId("resetEmail").value = "";
          byId("resetUsername").value = "";
        }, res.body.close_after_ms);
      }
    });
  });

  byId("sso").addEventListener("click", function () {
    showToast("Demo: SSO button clicked.", TOAST_CLEAR_MS);
  });
  byId("support").addEventListener("click", function (e) { e.preventDefault(); });

  stream();
})();
</script>
</body>
</html>
""")


def render_login_page(view: FeedView) -> str:
    """Fill the login page with the current feed view."""
    return LOGIN_PAGE.substitute(
        dot_class=html.escape(view.dot_class),
        badge=html.escape(view.badge),
        topic=html.escape(view.topic),
        price_text=html.escape(view.price_text),
        local_time=html.escape(view.local_time),
        error=html.escape(view.error or ""),
        advisory_class="" if view.error else "hidden",
        toast_clear_ms=settings.TOAST_CLEAR_MS,
    )


@router.get("/", response_class=HTMLResponse)
async def login_page(request: Request) -> HTMLResponse:
    """Get the login page HTML."""
    view = build_feed_view(request.app.state.feed_manager.snapshot)
    return HTMLResponse(content=render_login_page(view))


@router.post("/password-reset", response_model=ResetOutcome)
async def password_reset(body: ResetRequest) -> ResetOutcome:
    """Simulated reset; no email is sent."""
    return submit_password_reset(body.email, body.username)
