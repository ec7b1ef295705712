INDEX_HTML = r"""<!doctype html>
<html lang="en" data-bs-theme="dark">
<head>
  <meta charset="utf-8">
  <title>{{ app_title }}</title>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <link href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.3/dist/css/bootstrap.min.css" rel="stylesheet">
  <style>
    .list-group-item a { text-decoration: none; }
    textarea.config { font-family: monospace; min-height: 190px; }
  </style>
</head>
<body>
<nav class="navbar navbar-expand-lg bg-body-tertiary px-3">
  <a class="navbar-brand" href="#">{{ app_title }}</a>
  <div class="ms-auto d-flex gap-2">
    <a class="btn btn-outline-light btn-sm" href="{{ url_for('pkgshelf.refresh') }}">Refresh</a>
  </div>
</nav>

<div class="container py-4">
  <h4>Package Categories</h4>
  {% if not catalogs %}
    <div class="alert alert-secondary">No catalogs yet. Add packages under <code>{{ library_root }}</code> and refresh.</div>
  {% else %}
    <ul class="list-group mb-4">
      {% for name in catalogs %}
        <li class="list-group-item d-flex justify-content-between">
          <a href="{{ url_for('pkgshelf.catalog', name=name) }}">/{{ name }}</a>
          <span class="text-secondary small">{{ counts[name] }} package(s)</span>
        </li>
      {% endfor %}
    </ul>
  {% endif %}

  <h4>Generated Config</h4>
  <p class="small">Copy this into the client configuration.</p>
  <textarea class="form-control config" readonly>"CONTENT_URLS": {
{%- for name in categories %}
    "{{ name }}": "{{ base_url }}/{{ name }}"{{ "," if not loop.last }}
{%- endfor %}
}</textarea>

  <p class="small mt-4">Put <code>background.png</code> next to the config file and point the client at
    <a href="{{ url_for('pkgshelf.background') }}">/background</a> for a custom background.</p>
</div>
</body>
</html>
"""
