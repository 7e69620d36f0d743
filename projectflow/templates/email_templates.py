"""
Email templates for project collaboration notifications
"""
from html import escape
from typing import Tuple


class EmailTemplates:
    """HTML and text bodies for membership notifications"""

    ROLE_COLORS = {
        'owner': '#e53e3e',
        'admin': '#dd6b20',
        'member': '#3182ce',
        'viewer': '#718096'
    }

    @staticmethod
    def get_base_styles() -> str:
        return """
        <style>
            body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; margin: 0; padding: 0; background-color: #f8fafc; }
            .email-container { max-width: 600px; margin: 0 auto; background-color: #ffffff; border-radius: 12px; overflow: hidden; }
            .header { background: #4F46E5; color: white; padding: 30px; text-align: center; }
            .header h1 { margin: 0; font-size: 26px; font-weight: 600; }
            .content { padding: 35px 30px; }
            .role-badge { display: inline-block; padding: 6px 14px; border-radius: 20px; color: white; font-weight: 600; font-size: 13px; text-transform: uppercase; }
            .button { display: inline-block; background: #4F46E5; color: white; padding: 12px 28px; text-decoration: none; border-radius: 6px; margin: 20px 0; }
            .footer { text-align: center; color: #718096; font-size: 12px; padding: 20px; }
        </style>
        """

    @staticmethod
    def _wrap(title: str, body: str, to_email: str) -> str:
        return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="utf-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
            <title>{title}</title>
            {EmailTemplates.get_base_styles()}
        </head>
        <body>
            <div class="email-container">
                <div class="header">
                    <h1>{title}</h1>
                </div>
                <div class="content">
                    <p>Hello,</p>
                    {body}
                    <p>Thanks,<br><strong>The ProjectFlow Team</strong></p>
                </div>
                <div class="footer">
                    <p>This email was sent to {escape(to_email)}</p>
                </div>
            </div>
        </body>
        </html>
        """

    @staticmethod
    def _role_badge(role: str) -> str:
        color = EmailTemplates.ROLE_COLORS.get(role.lower(), '#3182ce')
        return f'<span class="role-badge" style="background-color: {color};">{escape(role)}</span>'

    @staticmethod
    def get_project_invitation_template(to_email: str, project_name: str, inviter_name: str,
                                        role: str, project_url: str) -> str:
        body = f"""
                    <p><strong>{escape(inviter_name)}</strong> has invited you to collaborate on
                    <strong>{escape(project_name)}</strong> as {EmailTemplates._role_badge(role)}.</p>
                    <div style="text-align: center;">
                        <a href="{escape(project_url)}" class="button">Open Project</a>
                    </div>
                    <p>If you didn't expect this invitation, you can safely ignore this email.</p>
        """
        return EmailTemplates._wrap("Project Invitation", body, to_email)

    @staticmethod
    def get_role_update_template(to_email: str, project_name: str, updater_name: str,
                                 new_role: str, project_url: str) -> str:
        body = f"""
                    <p><strong>{escape(updater_name)}</strong> has updated your role in
                    <strong>{escape(project_name)}</strong>.</p>
                    <p>Your new role is: {EmailTemplates._role_badge(new_role)}</p>
                    <div style="text-align: center;">
                        <a href="{escape(project_url)}" class="button">View Project</a>
                    </div>
                    <p>If you have any questions about this change, please contact the project owner or administrator.</p>
        """
        return EmailTemplates._wrap("Role Update", body, to_email)

    @staticmethod
    def get_removal_template(to_email: str, project_name: str, remover_name: str) -> str:
        body = f"""
                    <p><strong>{escape(remover_name)}</strong> has removed you from the project
                    <strong>{escape(project_name)}</strong>.</p>
                    <p>If you believe this was done in error, please contact the project owner or administrator.</p>
        """
        return EmailTemplates._wrap("Project Removal", body, to_email)

    @staticmethod
    def get_text_version(template_type: str, **kwargs) -> str:
        """Plain text alternative for each template"""
        if template_type == "project_invitation":
            return (
                f"{kwargs['inviter_name']} has invited you to collaborate on {kwargs['project_name']} "
                f"as a {kwargs['role']}.\n\nOpen the project: {kwargs['project_url']}\n\n"
                "If you didn't expect this invitation, you can safely ignore this email.\n\n"
                "The ProjectFlow Team"
            )
        if template_type == "role_update":
            return (
                f"{kwargs['updater_name']} has updated your role in {kwargs['project_name']}.\n"
                f"Your new role is: {kwargs['new_role']}\n\nView the project: {kwargs['project_url']}\n\n"
                "The ProjectFlow Team"
            )
        if template_type == "removal":
            return (
                f"{kwargs['remover_name']} has removed you from the project {kwargs['project_name']}.\n"
                "If you believe this was done in error, please contact the project owner or administrator.\n\n"
                "The ProjectFlow Team"
            )
        return "Email template not found."


def get_project_invitation_email(to_email: str, project_name: str, inviter_name: str,
                                 role: str, project_url: str) -> Tuple[str, str]:
    """Returns (html, text)"""
    html = EmailTemplates.get_project_invitation_template(to_email, project_name, inviter_name, role, project_url)
    text = EmailTemplates.get_text_version(
        "project_invitation", project_name=project_name, inviter_name=inviter_name,
        role=role, project_url=project_url
    )
    return html, text


def get_role_update_email(to_email: str, project_name: str, updater_name: str,
                          new_role: str, project_url: str) -> Tuple[str, str]:
    html = EmailTemplates.get_role_update_template(to_email, project_name, updater_name, new_role, project_url)
    text = EmailTemplates.get_text_version(
        "role_update", project_name=project_name, updater_name=updater_name,
        new_role=new_role, project_url=project_url
    )
    return html, text


def get_removal_email(to_email: str, project_name: str, remover_name: str) -> Tuple[str, str]:
    html = EmailTemplates.get_removal_template(to_email, project_name, remover_name)
    text = EmailTemplates.get_text_version("removal", project_name=project_name, remover_name=remover_name)
    return html, text
