HTML = """<!doctype html><meta charset="utf-8">
<title>Status Proxy</title>
<style>
body{font-family:system-ui,sans-serif;max-width:800px;margin:0 auto;padding:40px 20px;line-height:1.6}
.card{background:#f5f5f5;border-radius:8px;padding:12px 16px;margin-bottom:12px}
.meta{color:#666;font-size:13px}
.badge{padding:2px 8px;border-radius:999px;font-size:12px;background:#eee}
</style>
<h1>Status Proxy</h1>
<p class="meta">CORS-enabled proxy for the public status page API, with a 30-second cache.</p>
<div class="card"><code>GET /api/status</code>
  <p class="meta">Upstream status document, recovered from the HTML page when the provider serves markup.</p></div>
<div class="card"><code>GET /api/health</code>
  <p class="meta">Liveness probe; never calls upstream.</p></div>
<p>Last fetch: <span id="fb" class="badge">-</span> <span id="ts" class="meta"></span></p>
<script>
async function run(){
  const r = await fetch('/api/status', {cache:'no-store'});
  document.getElementById('fb').textContent =
    r.ok ? 'fallback: ' + (r.headers.get('X-Proxy-Fallback') || 'none') : 'error ' + r.status;
  document.getElementById('ts').textContent = new Date().toLocaleString();
}
run();
</script>
"""
