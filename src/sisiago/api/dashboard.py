"""Audit dashboard page that consumes the audit API."""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(prefix="/audit-logs", tags=["audit"])


@router.get("/ui", response_class=HTMLResponse)
async def audit_dashboard() -> HTMLResponse:
    """Minimal audit dashboard polling the stats endpoint."""
    return HTMLResponse(_DASHBOARD_HTML)


_DASHBOARD_HTML = """<!doctype html>
<html lang="pt-BR">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>SISIAGO - Auditoria</title>
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }
      h1 { margin-bottom: 0.5rem; }
      .row { margin-bottom: 1rem; }
      .cards { display: flex; gap: 1rem; flex-wrap: wrap; }
      .card { border: 1px solid #ddd; border-radius: 6px; padding: 0.8rem 1rem; }
      .card b { display: block; font-size: 1.6rem; }
      .bar { background: #3b82f6; height: 10px; }
      table { border-collapse: collapse; margin-top: 0.5rem; }
      td, th { padding: 0.2rem 0.8rem; text-align: left; }
      #error { color: #b91c1c; display: none; }
      button, select { padding: 0.4rem 0.8rem; margin-right: 0.5rem; }
    </style>
  </head>
  <body>
    <h1>Auditoria</h1>
    <div class="row">
      <select id="range">
        <option value="1h">1h</option>
        <option value="24h" selected>24h</option>
        <option value="7d">7d</option>
        <option value="30d">30d</option>
      </select>
      <button onclick="loadStats()">Atualizar</button>
      <a id="export" href="/audit-logs/export?format=csv">Exportar CSV</a>
    </div>
    <div id="error" class="row">
      <span id="error-text"></span>
      <button onclick="loadStats()">Tentar novamente</button>
    </div>
    <div class="cards">
      <div class="card">Total<b id="total">-</b></div>
      <div class="card">Criações<b id="op-CREATE">-</b></div>
      <div class="card">Atualizações<b id="op-UPDATE">-</b></div>
      <div class="card">Exclusões<b id="op-DELETE">-</b></div>
      <div class="card">Risco<b id="risk">-</b></div>
    </div>
    <h2>Por tabela</h2>
    <table id="tables"></table>
    <h2>Por usuário</h2>
    <table id="users"></table>
    <h2>Últimas 24 horas</h2>
    <table id="hourly"></table>
    <script>
      const REFRESH_MS = 60000;
      let inflight = null;

      function rows(id, items, label) {
        const max = Math.max(1, ...items.map((item) => item.count));
        const table = document.getElementById(id);
        table.replaceChildren();
        for (const item of items) {
          const tr = document.createElement('tr');
          const name = document.createElement('td');
          name.textContent = label(item);
          const count = document.createElement('td');
          count.textContent = item.count;
          const bar = document.createElement('div');
          bar.className = 'bar';
          bar.style.width = Math.round((item.count / max) * 200) + 'px';
          const barCell = document.createElement('td');
          barCell.appendChild(bar);
          tr.append(name, count, barCell);
          table.appendChild(tr);
        }
      }

      async function loadStats() {
        if (inflight) {
          inflight.abort();
        }
        inflight = new AbortController();
        const range = document.getElementById('range').value;
        const error = document.getElementById('error');
        try {
          const res = await fetch(
            '/audit-logs/stats?include_hourly=true&include_risk=true&time_range=' + range,
            { signal: inflight.signal, credentials: 'same-origin' }
          );
          const data = await res.json();
          if (!res.ok) {
            throw new Error(data.error || ('Erro ' + res.status));
          }
          error.style.display = 'none';
          document.getElementById('total').textContent = data.totalLogs;
          for (const [kind, count] of Object.entries(data.operationStats)) {
            document.getElementById('op-' + kind).textContent = count;
          }
          document.getElementById('risk').textContent =
            data.riskMetrics ? data.riskMetrics.riskScore : '-';
          rows('tables', data.tableStats, (item) => item.table_name);
          rows('users', data.userStats,
            (item) => item.user_name + ' (' + item.user_email + ')');
          rows('hourly', data.hourlyStats || [], (item) => item.hour.slice(11, 16));
        } catch (err) {
          if (err.name === 'AbortError') {
            return;
          }
          document.getElementById('error-text').textContent = err.message;
          error.style.display = 'block';
        }
      }

      document.getElementById('range').addEventListener('change', loadStats);
      loadStats();
      setInterval(loadStats, REFRESH_MS);
    </script>
  </body>
</html>
"""
