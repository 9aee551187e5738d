from aura_store.services.email_service import send_email
from aura_store.utils.template import render_template
from aura_store.config import settings


def send_user_email(template, subject, user, **ctx):
    html = render_template(template, store_name=settings.STORE_NAME, **ctx)
    return send_email(to=user.email, subject=subject, html=html)


def send_admin_email(template, subject, **ctx):
    if not settings.ADMIN_EMAILS:
        return False
    html = render_template(template, store_name=settings.STORE_NAME, **ctx)
    return send_email(to=settings.ADMIN_EMAILS, subject=subject, html=html)
