"""
Shared Streamlit styling for the survey site
Keeps the site, admin and auth pages visually consistent
"""
import html

THEME_COLORS = {
    'primary': '#4f46e5',
    'secondary': '#7c3aed',
    'success': '#16a34a',
    'warning': '#f59e0b',
    'error': '#dc2626',
    'info': '#2563eb',
    'bg_light': '#f8f9fa',
    'text_light': '#666666',
    'border': '#e9ecef',
}

UNIFIED_CSS = """
<style>
.main {
    background-color: #f8f9fa;
}

/* ========== header ========== */
.main-header {
    text-align: center;
    padding: 1.5rem 1rem;
    background: linear-gradient(135deg, #4f46e5 0%, #7c3aed 100%);
    color: white;
    border-radius: 15px;
    margin-bottom: 1.5rem;
    box-shadow: 0 8px 16px rgba(79, 70, 229, 0.3);
}

.main-header h1 {
    margin: 0;
    font-size: 2.2rem;
    font-weight: 700;
}

.main-header p {
    margin: 0.5rem 0 0 0;
    font-size: 1.05rem;
    opacity: 0.95;
}

.admin-header {
    background: linear-gradient(135deg, #1f2937 0%, #4f46e5 100%);
}

/* ========== buttons ========== */
.stButton > button {
    border-radius: 10px;
    font-weight: 600;
    transition: all 0.3s ease;
}

.stButton > button:hover {
    transform: translateY(-2px);
    box-shadow: 0 6px 12px rgba(0, 0, 0, 0.15);
}

.stButton > button[kind="primary"] {
    background: linear-gradient(135deg, #4f46e5 0%, #7c3aed 100%);
    border: none;
}

/* ========== cards ========== */
.info-card {
    background: white;
    padding: 1.25rem;
    border-radius: 12px;
    box-shadow: 0 2px 8px rgba(0, 0, 0, 0.08);
    margin-bottom: 1rem;
    border-left: 4px solid #4f46e5;
}

.success-card {
    border-left-color: #16a34a;
}

.warning-card {
    border-left-color: #f59e0b;
}

.error-card {
    border-left-color: #dc2626;
}

/* unanswered required question */
.question-invalid {
    border: 2px solid #dc2626;
    border-radius: 10px;
    padding: 0.25rem 0.75rem;
    margin-bottom: 0.5rem;
    background-color: #fef2f2;
}

.question-title {
    font-weight: 600;
    margin: 0.75rem 0 0.25rem 0;
}

.required-mark {
    color: #dc2626;
}

.review-answer {
    background: #f0f4ff;
    border-radius: 8px;
    padding: 0.5rem 0.75rem;
    margin-bottom: 0.75rem;
}

/* ========== badges ========== */
.status-badge {
    display: inline-block;
    padding: 0.3rem 0.9rem;
    border-radius: 20px;
    font-size: 0.85rem;
    font-weight: 600;
}

.status-success {
    background-color: #16a34a;
    color: white;
}

.status-warning {
    background-color: #f59e0b;
    color: white;
}

.status-error {
    background-color: #dc2626;
    color: white;
}

.status-info {
    background-color: #2563eb;
    color: white;
}

/* ========== progress ========== */
.stProgress > div > div > div > div {
    background: linear-gradient(90deg, #4f46e5 0%, #7c3aed 100%);
    border-radius: 10px;
}

/* ========== metrics ========== */
.stMetric {
    background-color: white;
    padding: 1rem;
    border-radius: 12px;
    box-shadow: 0 2px 8px rgba(0, 0, 0, 0.08);
    border-left: 4px solid #4f46e5;
}

/* ========== footer ========== */
.footer {
    text-align: center;
    color: #666;
    padding: 2rem 1rem;
    margin-top: 3rem;
    border-top: 2px solid #e9ecef;
}

.footer p {
    margin: 0.5rem 0;
}

@media (max-width: 768px) {
    .main-header h1 {
        font-size: 1.6rem;
    }
}
</style>
"""


def apply_unified_theme():
    """Inject the site CSS into the current page"""
    import streamlit as st
    st.markdown(UNIFIED_CSS, unsafe_allow_html=True)


def create_header(title: str, subtitle: str = "", icon: str = "📋", admin: bool = False):
    """Page header banner

    Args:
        title: main title
        subtitle: optional line under the title
        icon: emoji shown before the title
        admin: use the darker admin banner
    """
    import streamlit as st
    css_class = "main-header admin-header" if admin else "main-header"
    header_html = f"""
    <div class="{css_class}">
        <h1>{icon} {html.escape(title)}</h1>
        {f'<p>{html.escape(subtitle)}</p>' if subtitle else ''}
    </div>
    """
    st.markdown(header_html, unsafe_allow_html=True)


def create_footer(system_name: str = "", additional_info: str = ""):
    import streamlit as st
    footer_html = f"""
    <div class="footer">
        {f'<p><strong>{system_name}</strong></p>' if system_name else ''}
        {f'<p><small>{additional_info}</small></p>' if additional_info else ''}
    </div>
    """
    st.markdown(footer_html, unsafe_allow_html=True)


def create_info_card(content: str, card_type: str = "info"):
    """Bordered card; content is trusted HTML

    Args:
        content: card body
        card_type: info, success, warning or error
    """
    import streamlit as st
    card_class = f"info-card {card_type}-card" if card_type != "info" else "info-card"
    st.markdown(f'<div class="{card_class}">{content}</div>', unsafe_allow_html=True)


def create_status_badge(text: str, status: str = "info"):
    import streamlit as st
    st.markdown(f'<span class="status-badge status-{status}">{html.escape(text)}</span>',
                unsafe_allow_html=True)


def create_question_title(number: int, text: str, required: bool = False, invalid: bool = False):
    """Question heading, outlined in red when it is a missing required answer"""
    import streamlit as st
    mark = ' <span class="required-mark">*</span>' if required else ''
    title = f'<div class="question-title">{number}. {html.escape(text)}{mark}</div>'
    if invalid:
        title = f'<div class="question-invalid">{title}</div>'
    st.markdown(title, unsafe_allow_html=True)
