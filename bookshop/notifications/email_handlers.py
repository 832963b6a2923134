from bookshop.config import settings
from bookshop.services.email_service import send_email
from bookshop.utils.template import render_template


def send_user_email(template, subject, user, **ctx):
    html = render_template(template, user=user, store_name=settings.STORE_NAME, **ctx)
    return send_email(to=user.email, subject=subject, html=html)


def send_admin_email(template, subject, **ctx):
    if not settings.admin_email_list:
        return False
    html = render_template(template, store_name=settings.STORE_NAME, **ctx)
    return send_email(to=settings.admin_email_list, subject=subject, html=html)
