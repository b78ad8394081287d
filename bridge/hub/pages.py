import html
from typing import Optional

_LOGIN_PAGE = """<!doctype html>
<html>
<head>
<meta charset="utf-8">
<title>Dashboard Login</title>
<meta name="viewport" content="width=device-width,initial-scale=1">
</head>
<body>
<h3>Trading Dashboard</h3>
__ERROR__
<form method="POST" action="/login">
  <label>Username <input type="text" name="username" required></label><br>
  <label>Password <input type="password" name="password" required></label><br>
  <button type="submit">Login</button>
</form>
</body>
</html>
"""

_DASHBOARD_PAGE = """<!doctype html>
<html>
<head>
<meta charset="utf-8">
<title>Remote Trading Dashboard</title>
<meta name="viewport" content="width=device-width,initial-scale=1">
<style>
table { border-collapse: collapse; margin-bottom: 1em; }
td, th { padding: 2px 8px; border-bottom: 1px solid #ddd; }
.neg { color: #dc3545; } .pos { color: #198754; }
</style>
</head>
<body>
<h3>Remote Trading Dashboard <a href="/logout">Logout</a></h3>
<div id="accounts"></div>
<button data-action="flatten-all">Emergency Flatten (ALL Accounts)</button>
<p>Connected: <span id="status">--</span> | Last Update: <span id="lastUpdate">--</span></p>
<script>
const evt = new EventSource('/events');
evt.onopen = () => { document.getElementById('status').innerText = 'connected'; };
evt.onerror = () => { document.getElementById('status').innerText = 'disconnected'; };
evt.onmessage = (e) => {
  document.getElementById('lastUpdate').innerText = new Date().toLocaleTimeString();
  try { render(JSON.parse(e.data)); } catch (err) { console.error(err); }
};
async function send(url, body) {
  if (!confirm('Are you sure?\\n\\n' + url + ' ' + JSON.stringify(body))) return;
  const resp = await fetch(url, {method: 'POST', headers: {'Content-Type': 'application/json'}, body: JSON.stringify(body)});
  if (!resp.ok) alert('Failed to send command: ' + resp.statusText);
}
document.addEventListener('click', (e) => {
  const t = e.target.closest('[data-action]');
  if (!t) return;
  const d = t.dataset;
  if (d.action === 'flatten-all') send('/api/flatten', {});
  if (d.action === 'flatten-account') send('/api/flatten_account', {account: d.account});
  if (d.action === 'close-position') send('/api/close_position', {account: d.account, instrument: d.instrument});
  if (d.action === 'cancel-order') send('/api/cancel_order', {account: d.account, orderId: d.orderId});
});
function esc(v) { const s = document.createElement('span'); s.innerText = String(v); return s.innerHTML; }
function pnl(v) { return '<span class="' + (v >= 0 ? 'pos' : 'neg') + '">' + v.toFixed(2) + '</span>'; }
function render(data) {
  const root = document.getElementById('accounts');
  root.innerHTML = '';
  for (const acc of Object.keys(data).sort()) {
    const s = data[acc];
    let out = '<h4>' + esc(acc) + ' <button data-action="flatten-account" data-account="' + esc(acc) + '">Flatten</button></h4>';
    out += '<p>Balance ' + s.balance.toFixed(2) + ' | Realized ' + pnl(s.realized) + ' | Unrealized ' + pnl(s.unrealized) + '</p>';
    out += '<table><tr><th>Instrument</th><th>MP</th><th>Qty</th><th>Avg</th><th>Price</th><th>Unrealized</th><th></th></tr>';
    for (const p of s.positions || []) {
      out += '<tr><td>' + esc(p.instrument) + '</td><td>' + esc(p.marketPosition) + '</td><td>' + p.quantity +
        '</td><td>' + p.averagePrice.toFixed(2) + '</td><td>' + p.currentPrice.toFixed(2) + '</td><td>' + pnl(p.unrealized) +
        '</td><td><button data-action="close-position" data-account="' + esc(acc) + '" data-instrument="' + esc(p.instrument) + '">Close</button></td></tr>';
    }
    out += '</table><table><tr><th>Instrument</th><th>Type</th><th>Action</th><th>Qty</th><th>State</th><th></th></tr>';
    for (const o of s.workingOrders || []) {
      out += '<tr><td>' + esc(o.instrument) + '</td><td>' + esc(o.name || o.orderType) + '</td><td>' + esc(o.orderAction) +
        '</td><td>' + o.quantity + '</td><td>' + esc(o.state) +
        '</td><td><button data-action="cancel-order" data-account="' + esc(acc) + '" data-order-id="' + esc(o.orderId) + '">Cancel</button></td></tr>';
    }
    root.insertAdjacentHTML('beforeend', out + '</table>');
  }
}
</script>
</body>
</html>
"""


def render_login(error: Optional[str] = None) -> str:
    banner = f'<p class="error">{html.escape(error)}</p>' if error else ""
    return _LOGIN_PAGE.replace("__ERROR__", banner)


def render_dashboard() -> str:
    return _DASHBOARD_PAGE
