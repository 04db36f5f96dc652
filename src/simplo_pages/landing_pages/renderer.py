"""HTML rendering for published landing and thank-you pages."""

import json
import math
from datetime import datetime
from html import escape
from typing import Dict, List, Optional, Any
from urllib.parse import quote_plus

from ..core.utils import is_light_background
from ..editor.canvas import DEVICE_SIZES
from ..storage import FileStorage
from ..storage.models import LandingPage, ThankYouPage, FormType

BRAND_LOGO_DARK = "Logo Empresa Simplo/logo simplo azul.png"
BRAND_LOGO_LIGHT = "Logo Empresa Simplo/logo simplo branca.png"

SYSTEM_FONTS = {"Arial", "Helvetica", "Georgia", "Times New Roman", "Verdana", "sans-serif", "serif"}


def _attr(value: Any) -> str:
    return escape(str(value if value is not None else ""), quote=True)


def _js(value: Any) -> str:
    """Embed a value in an inline script without closing the tag."""
    return json.dumps(value).replace("</", "<\\/")


def _num(value: Any, default: float = 0) -> float:
    """Read a stored number, falling back when the value is not numeric."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def google_fonts_link(fonts: List[str]) -> str:
    families = []
    for font in fonts:
        if font and font not in SYSTEM_FONTS and font not in families:
            families.append(font)
    if not families:
        return ""
    query = "&".join(f"family={quote_plus(f)}:wght@400;500;600;700" for f in families)
    return f'<link href="https://fonts.googleapis.com/css2?{query}&display=swap" rel="stylesheet">'


def google_analytics_script(ga_id: str) -> str:
    return f'''<script async src="https://www.googletagmanager.com/gtag/js?id={quote_plus(ga_id)}"></script>
    <script>
        window.dataLayer = window.dataLayer || [];
        function gtag(){{dataLayer.push(arguments);}}
        gtag('js', new Date());
        gtag('config', {_js(ga_id)});
    </script>'''


def meta_pixel_script(pixel_id: str) -> str:
    return f'''<script>
        !function(f,b,e,v,n,t,s)
        {{if(f.fbq)return;n=f.fbq=function(){{n.callMethod?
        n.callMethod.apply(n,arguments):n.queue.push(arguments)}};
        if(!f._fbq)f._fbq=n;n.push=n;n.loaded=!0;n.version='2.0';
        n.queue=[];t=b.createElement(e);t.async=!0;
        t.src=v;s=b.getElementsByTagName(e)[0];
        s.parentNode.insertBefore(t,s)}}(window, document,'script',
        'https://connect.facebook.net/en_US/fbevents.js');
        fbq('init', {_js(pixel_id)});
        fbq('track', 'PageView');
    </script>'''


def tracking_script(landing_page_id: str) -> str:
    """Report the visit, its duration and scroll depth to the tracking endpoints."""
    return f'''<script>
        (function() {{
            const pageId = {_js(landing_page_id)};
            const sessionId = (window.crypto && crypto.randomUUID) ? crypto.randomUUID()
                : String(Date.now()) + Math.random().toString(16).slice(2);
            const startTime = Date.now();
            const sent = {{}};
            window.simploSessionId = sessionId;

            function post(url, body) {{
                return fetch(url, {{
                    method: 'POST',
                    headers: {{'Content-Type': 'application/json'}},
                    body: JSON.stringify(body),
                    keepalive: true
                }}).catch(function(err) {{ console.error('Tracking error:', err); }});
            }}

            window.simploTrack = function(eventType, eventData) {{
                return post('/api/track/event', {{
                    landing_page_id: pageId,
                    session_id: sessionId,
                    event_type: eventType,
                    event_data: eventData || {{}}
                }});
            }};

            post('/api/track/view', {{
                landing_page_id: pageId,
                session_id: sessionId,
                referrer: document.referrer,
                user_agent: navigator.userAgent
            }});

            window.addEventListener('beforeunload', function() {{
                post('/api/track/duration', {{
                    session_id: sessionId,
                    duration_seconds: Math.floor((Date.now() - startTime) / 1000)
                }});
            }});

            window.addEventListener('scroll', function() {{
                const depth = Math.round(
                    (window.scrollY + window.innerHeight) / document.documentElement.scrollHeight * 100
                );
                [50, 90].forEach(function(mark) {{
                    if (depth >= mark && !sent[mark]) {{
                        sent[mark] = true;
                        window.simploTrack('scroll_' + mark + '_percent');
                    }}
                }});
            }});
        }})();
    </script>'''


def redirect_script(url: str, delay_seconds: int) -> str:
    return f'''<script>
        (function() {{
            let remaining = {int(delay_seconds)};
            const counter = document.getElementById('redirect-countdown');
            const timer = setInterval(function() {{
                remaining -= 1;
                if (counter && remaining >= 0) counter.textContent = remaining;
            }}, 1000);
            setTimeout(function() {{
                clearInterval(timer);
                window.location.href = {_js(url)};
            }}, {int(delay_seconds) * 1000});
        }})();
    </script>'''


def render_form_field(field: Dict[str, Any]) -> str:
    """Render one system form field."""
    field_id = _attr(field.get("id"))
    field_type = field.get("type") or "text"
    label = escape(str(field.get("label") or ""))
    placeholder = _attr(field.get("placeholder") or "")
    required = bool(field.get("required"))
    required_attr = " required" if required else ""
    star = '<span class="text-danger">*</span>' if required else ""
    options = field.get("options") or []

    html = '<div class="mb-2">'
    if field_type != "checkbox" or options:
        html += f'<label class="form-label small fw-medium" for="field-{field_id}">{label}{star}</label>'

    if field_type == "textarea":
        html += (f'<textarea class="form-control form-control-sm" id="field-{field_id}" name="{field_id}" '
                 f'rows="3" placeholder="{placeholder}"{required_attr}></textarea>')
    elif field_type == "select":
        options_html = '<option value="">Selecione...</option>'
        for opt in options:
            options_html += f'<option value="{_attr(opt.get("value"))}">{escape(str(opt.get("label", "")))}</option>'
        html += (f'<select class="form-select form-select-sm" id="field-{field_id}" name="{field_id}"'
                 f'{required_attr}>{options_html}</select>')
    elif field_type == "radio":
        for i, opt in enumerate(options):
            html += f'''<div class="form-check">
                <input class="form-check-input" type="radio" name="{field_id}" id="field-{field_id}-{i}"
                    value="{_attr(opt.get("value"))}"{required_attr}>
                <label class="form-check-label small" for="field-{field_id}-{i}">{escape(str(opt.get("label", "")))}</label>
            </div>'''
    elif field_type == "checkbox" and options:
        for i, opt in enumerate(options):
            html += f'''<div class="form-check">
                <input class="form-check-input" type="checkbox" name="{field_id}" id="field-{field_id}-{i}"
                    value="{_attr(opt.get("value"))}">
                <label class="form-check-label small" for="field-{field_id}-{i}">{escape(str(opt.get("label", "")))}</label>
            </div>'''
    elif field_type == "checkbox":
        html += f'''<div class="form-check">
            <input class="form-check-input" type="checkbox" id="field-{field_id}" name="{field_id}" value="true"{required_attr}>
            <label class="form-check-label small" for="field-{field_id}">{label}{star}</label>
        </div>'''
    else:
        html += (f'<input type="{_attr(field_type)}" class="form-control form-control-sm" id="field-{field_id}" '
                 f'name="{field_id}" placeholder="{placeholder}"{required_attr}>')

    html += "</div>"
    return html


class PageRenderer:
    """Builds complete HTML documents for the public routes."""

    def __init__(self, files: FileStorage, site_name: str = "Simplo"):
        self.files = files
        self.site_name = site_name

    def image_url(self, path: Optional[str], bucket: str = "landing-pages") -> str:
        return self.files.public_url(path, bucket)

    def _document(self, title: str, head: str, body: str, body_style: str = "") -> str:
        return f'''<!DOCTYPE html>
<html lang="pt-BR">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)}</title>
    <link href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist/css/bootstrap.min.css" rel="stylesheet">
    {head}
</head>
<body style="{_attr(body_style)}">
    {body}
</body>
</html>'''

    # === LANDING PAGES ===

    def render_form(self, page: LandingPage) -> str:
        """The lead form: custom HTML verbatim or the system form."""
        if page.form_type == FormType.CUSTOM.value:
            return f'<div class="custom-form" data-submit-url="/{_attr(page.slug)}/submit">{page.content.get("customHtml") or ""}</div>'

        colors = page.colors
        fields_html = "".join(render_form_field(f) for f in page.form_fields)
        return f'''<form class="lead-capture-form p-3 rounded-4 w-100" method="post"
            action="/{_attr(page.slug)}/submit"
            style="background: rgba(255,255,255,0.12); backdrop-filter: blur(8px);">
            <div class="alert alert-success small p-2 d-none" data-role="success">Formulário enviado com sucesso!</div>
            <div class="alert alert-danger small p-2 d-none" data-role="error"></div>
            <div style="max-height: 60vh; overflow-y: auto;">{fields_html}</div>
            <button type="submit" class="btn w-100 text-white fw-medium btn-sm py-2 rounded-3"
                style="background: linear-gradient(135deg, {_attr(colors["primary"])}, {_attr(colors["secondary"])});">
                Enviar
            </button>
        </form>'''

    def _submit_script(self, page: LandingPage) -> str:
        return f'''<script>
        document.querySelectorAll('.lead-capture-form, .custom-form form').forEach(function(form) {{
            form.addEventListener('submit', async function(e) {{
                e.preventDefault();
                const data = {{}};
                new FormData(form).forEach(function(value, key) {{
                    data[key] = data[key] ? data[key] + ', ' + value : value;
                }});
                const button = form.querySelector('[type=submit]');
                const success = form.querySelector('[data-role=success]');
                const error = form.querySelector('[data-role=error]');
                if (button) {{ button.disabled = true; }}
                try {{
                    const response = await fetch({_js("/" + page.slug + "/submit")}, {{
                        method: 'POST',
                        headers: {{'Content-Type': 'application/json'}},
                        body: JSON.stringify(data)
                    }});
                    const result = await response.json();
                    if (!response.ok) {{ throw new Error(result.detail && result.detail.detail || 'Erro ao enviar formulário. Tente novamente.'); }}
                    if (window.simploTrack) {{ window.simploTrack('form_submit'); }}
                    if (window.gtag) {{ gtag('event', 'conversion', {{send_to: {_js(page.ga_id or "")}}}); }}
                    if (window.fbq) {{ fbq('track', 'Lead'); }}
                    if (result.redirect_url) {{ window.location.href = result.redirect_url; return; }}
                    form.reset();
                    if (success) {{ success.classList.remove('d-none'); }}
                    if (error) {{ error.classList.add('d-none'); }}
                }} catch (err) {{
                    if (error) {{ error.textContent = err.message; error.classList.remove('d-none'); }}
                }} finally {{
                    if (button) {{ button.disabled = false; }}
                }}
            }});
        }});
    </script>'''

    def render_widget(self, widget: Dict[str, Any], page: LandingPage) -> str:
        """Absolutely position a canvas widget."""
        position, size, config = (
            value if isinstance(value, dict) else {}
            for value in (widget.get("position"), widget.get("size"), widget.get("config"))
        )
        content = widget.get("content")
        colors = page.colors
        radius = int(_num(config.get("borderRadius"), 0))

        style = (f"position:absolute;left:{int(_num(position.get('x')))}px;top:{int(_num(position.get('y')))}px;"
                 f"width:{int(_num(size.get('width')))}px;height:{int(_num(size.get('height')))}px;")
        widget_type = widget.get("type")

        if widget_type == "image":
            src = self.image_url(content) if isinstance(content, str) else ""
            opacity = _num(config.get("opacity"), 100) / 100
            inner = (f'<img src="{_attr(src)}" alt="" style="width:100%;height:100%;'
                     f'object-fit:{_attr(config.get("fit", "cover"))};border-radius:{radius}px;opacity:{opacity};">')
        elif widget_type == "heading":
            inner = (f'<h2 style="font-family:{_attr(page.fonts["title"])};color:{_attr(colors["primary"])};">'
                     f'{escape(str(content or ""))}</h2>')
        elif widget_type == "text":
            inner = f'<p>{escape(str(content or "")).replace(chr(10), "<br>")}</p>'
        elif widget_type in ("button", "link"):
            if isinstance(content, dict):
                text, url = content.get("text", ""), content.get("url", "#")
            else:
                text, url = content or "", "#"
            if not str(url).startswith(("http://", "https://", "/", "#", "mailto:", "tel:")):
                url = "#"
            if widget_type == "button":
                inner = (f'<a href="{_attr(url)}" class="btn text-white w-100 h-100 d-flex align-items-center '
                         f'justify-content-center" style="border-radius:{radius}px;background:linear-gradient(135deg, '
                         f'{_attr(colors["primary"])}, {_attr(colors["secondary"])});">{escape(str(text))}</a>')
            else:
                inner = f'<a href="{_attr(url)}" style="color:{_attr(colors["primary"])};">{escape(str(text))}</a>'
        elif widget_type in ("list", "ordered-list"):
            items = content if isinstance(content, list) else [content] if content else []
            tag = "ol" if widget_type == "ordered-list" else "ul"
            inner = f"<{tag}>" + "".join(f"<li>{escape(str(i))}</li>" for i in items) + f"</{tag}>"
        elif widget_type == "video":
            src = content if isinstance(content, str) and content.startswith("https://") else ""
            inner = (f'<iframe src="{_attr(src)}" style="width:100%;height:100%;border:0;border-radius:{radius}px;" '
                     f'allowfullscreen></iframe>') if src else ""
        elif widget_type == "form":
            inner = self.render_form(page)
        else:
            inner = ""

        return f'<div class="widget widget-{_attr(widget_type)}" style="{style}">{inner}</div>'

    def render_landing_page(self, page: LandingPage) -> str:
        colors = page.colors
        fonts = page.fonts

        head_parts = [google_fonts_link([fonts["title"], fonts["body"]])]
        if page.ga_id:
            head_parts.append(google_analytics_script(page.ga_id))
        if page.meta_pixel_id:
            head_parts.append(meta_pixel_script(page.meta_pixel_id))
        head_parts.append(f'<meta name="description" content="{_attr(page.description)}">')
        head = "\n    ".join(p for p in head_parts if p)

        brand_logo = BRAND_LOGO_DARK if is_light_background(colors["background"]) else BRAND_LOGO_LIGHT

        background = ""
        if page.background_url:
            background = (f'<div style="position:fixed;inset:0;z-index:0;background:url(\'{_attr(self.image_url(page.background_url))}\') '
                          f'center/cover no-repeat;"></div>')

        if page.widgets:
            canvas = DEVICE_SIZES["desktop"]
            widgets_html = "".join(self.render_widget(w, page) for w in page.widgets)
            main = (f'<div class="mx-auto" style="position:relative;width:{canvas["width"]}px;max-width:100%;'
                    f'min-height:{canvas["height"]}px;">{widgets_html}</div>')
        else:
            main = self._classic_layout(page)

        body = f'''{background}
    <div class="d-flex flex-column min-vh-100" style="position:relative;z-index:1;">
        <main class="flex-grow-1 container py-4">
            <div class="d-flex justify-content-center mb-4">
                <img src="{_attr(self.image_url(brand_logo))}" alt="Logo {escape(self.site_name)}" width="200" height="60" style="object-fit:contain;">
            </div>
            <div class="text-center mx-auto mb-4" style="max-width: 48rem;">
                <h1 class="fw-bold mb-3" style="font-family:{_attr(fonts["title"])};color:{_attr(colors["primary"])};">{escape(page.title)}</h1>
                <p class="fs-5">{escape(page.description)}</p>
            </div>
            {main}
        </main>
        <footer class="mt-auto border-top py-4 small">
            <div class="container d-flex flex-column flex-md-row justify-content-center align-items-center gap-3">
                <a href="/politica-de-privacidade" style="color:inherit;">Política de privacidade</a>
                <span>&copy; {datetime.now().year} {escape(self.site_name)}. Todos os direitos reservados</span>
            </div>
        </footer>
    </div>
    {tracking_script(page.id)}
    {self._submit_script(page)}'''

        body_style = f"background-color:{colors['background']};color:{colors['text']};font-family:{fonts['body']};"
        return self._document(page.title, head, body, body_style)

    def _classic_layout(self, page: LandingPage) -> str:
        participants = ""
        if page.participants_image_url:
            participants = (f'<img src="{_attr(self.image_url(page.participants_image_url))}" alt="Participantes" '
                            f'class="img-fluid rounded-3" style="max-height:400px;object-fit:contain;">')

        center = ""
        if page.logo_url:
            center += (f'<img src="{_attr(self.image_url(page.logo_url))}" alt="Logo" class="img-fluid" '
                       f'style="max-height:240px;object-fit:contain;">')
        if page.event_date_image_url:
            center += (f'<img src="{_attr(self.image_url(page.event_date_image_url))}" alt="Data do Evento" '
                       f'class="img-fluid" style="max-height:140px;object-fit:contain;">')

        columns = {
            "participants": f'<div class="col-lg-4 d-flex justify-content-center">{participants}</div>',
            "center": f'<div class="col-lg-4 d-flex flex-column gap-3 align-items-center">{center}</div>',
            "form": (f'<div class="col-lg-4 d-flex justify-content-center">'
                     f'<div class="w-100" style="max-width: 24rem;">{self.render_form(page)}</div></div>'),
        }
        position = page.content.get("formPosition", "right")
        if position == "left":
            order = ["form", "center", "participants"]
        elif position == "center":
            order = ["participants", "form", "center"]
        else:
            order = ["participants", "center", "form"]

        return f'''<div style="height: 60px;"></div>
            <div class="mx-auto" style="max-width: 64rem;">
                <div class="row g-4 align-items-center">{"".join(columns[c] for c in order)}</div>
            </div>'''

    # === THANK-YOU PAGES ===

    def render_thank_you_page(self, page: ThankYouPage) -> str:
        colors = page.colors
        logo = ""
        if page.logo_url:
            logo = (f'<div class="mb-4"><img src="{_attr(self.image_url(page.logo_url, "thank-you-pages"))}" '
                    f'alt="{_attr(page.title)}" class="img-fluid" style="max-height:240px;object-fit:contain;"></div>')

        message = escape(page.message).replace("\n", "<br>")

        redirect = ""
        countdown = ""
        if page.has_redirect:
            countdown = (f'<p class="small opacity-75">Você será redirecionado em '
                         f'<span id="redirect-countdown">{int(page.redirect_delay)}</span> segundos...</p>')
            redirect = redirect_script(page.redirect_url, page.redirect_delay)

        body = f'''<div class="min-vh-100 d-flex flex-column align-items-center justify-content-center p-4">
        {logo}
        <div class="mx-auto text-center" style="max-width: 42rem;">
            <h1 class="display-5 fw-bold mb-4">{escape(page.title)}</h1>
            <div class="fs-4" style="opacity:0.9;">{message}</div>
            {countdown}
        </div>
    </div>
    {redirect}'''

        body_style = f"background-color:{colors.get('background')};color:{colors.get('text')};"
        return self._document(page.title, "", body, body_style)

    def render_not_found(self) -> str:
        body = '''<div class="min-vh-100 d-flex flex-column align-items-center justify-content-center text-center p-4">
        <h1 class="display-4 fw-bold">404</h1>
        <p class="fs-5">Página não encontrada</p>
    </div>'''
        return self._document("Página não encontrada", "", body)
