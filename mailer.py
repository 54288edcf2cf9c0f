import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from markupsafe import escape
from utils import urgency_for, format_days_left, format_expiry_date
import logging

REMINDER_HTML = """
<html>
  <head>
    <style>
      body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
      .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
      .header {{ background-color: #3B82F6; color: white; padding: 15px; border-radius: 5px 5px 0 0; }}
      .content {{ border: 1px solid #ddd; border-top: none; padding: 20px; border-radius: 0 0 5px 5px; }}
      .footer {{ margin-top: 20px; font-size: 12px; color: #666; text-align: center; }}
      .urgent {{ color: #EF4444; font-weight: bold; }}
      .important {{ color: #F59E0B; font-weight: bold; }}
      .notice {{ color: #3B82F6; font-weight: bold; }}
      .detail-label {{ width: 120px; font-weight: bold; }}
    </style>
  </head>
  <body>
    <div class="container">
      <div class="header"><h2>Renewal Reminder</h2></div>
      <div class="content">
        <p>Hello,</p>
        <p>This is a reminder that the following item is due for renewal:</p>
        <table class="details">
          <tr><td class="detail-label">Client:</td><td>{client_name}</td></tr>
          <tr><td class="detail-label">Item:</td><td>{item_name}</td></tr>
          <tr><td class="detail-label">Type:</td><td>{item_type}</td></tr>
          <tr><td class="detail-label">Expiry Date:</td><td>{expiry_date}</td></tr>
          <tr><td class="detail-label">Status:</td><td class="{urgency}">{status}</td></tr>
          {notes_row}
        </table>
        <p>Please take appropriate action to renew this item before its expiration date.</p>
        <p>Thank you.</p>
      </div>
      <div class="footer">
        <p>This is an automated message from the Renewal Manager System.</p>
      </div>
    </div>
  </body>
</html>
"""


def build_subject(client_name: str, item_name: str, days_before_expiry: int) -> str:
    prefix = "URGENT" if days_before_expiry <= 7 else "Reminder"
    return f"[{prefix}] Renewal for {client_name} - {item_name}"


class Notifier:
    """Renders reminder emails and delivers them over SMTP.

    Built once at startup and handed to the reminder engine. With dry_run
    set (or no SMTP host) messages are only logged.
    """

    def __init__(
        self,
        host: str = "",
        port: int = 587,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        sender_name: str = "Renewal Manager",
        sender_email: str = "",
        timeout: float = 30,
        dry_run: bool = True,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender_name = sender_name
        self.sender_email = sender_email
        self.timeout = timeout
        self.dry_run = dry_run or not host

    @classmethod
    def from_config(cls, config):
        return cls(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            username=config.SMTP_USERNAME,
            password=config.SMTP_PASSWORD,
            use_tls=config.SMTP_USE_TLS,
            sender_name=config.SENDER_NAME,
            sender_email=config.SENDER_EMAIL,
            timeout=config.SMTP_TIMEOUT,
            dry_run=config.EMAIL_DRY_RUN,
        )

    def render(self, client_name, item_name, item_type, expiry_date, days_left, notes=None) -> str:
        notes_row = ""
        if notes:
            notes_row = f'<tr><td class="detail-label">Notes:</td><td>{escape(notes)}</td></tr>'
        return REMINDER_HTML.format(
            client_name=escape(client_name),
            item_name=escape(item_name),
            item_type=escape(item_type),
            expiry_date=format_expiry_date(expiry_date),
            urgency=urgency_for(days_left),
            status=format_days_left(days_left),
            notes_row=notes_row,
        )

    def send(self, to: str, subject: str, body: str) -> bool:
        if self.dry_run:
            logging.info("[DRY RUN] Would send email to=%s subject=%s", to, subject)
            logging.debug("Body (HTML):\n%s", body)
            return True

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.sender_name} <{self.sender_email}>"
        msg["To"] = to
        msg.attach(MIMEText(body, "html"))

        try:
            if self.use_tls:
                server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
            else:
                server = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        except (smtplib.SMTPException, OSError) as e:
            logging.error("Failed to connect to %s for email to %s: %s", self.host, to, e)
            return False

        try:
            if self.use_tls:
                server.ehlo()
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            server.sendmail(self.sender_email, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logging.error("Failed to send email to %s: %s", to, e)
            return False
        finally:
            self._disconnect(server)

        logging.info("Email sent to %s", to)
        return True

    @staticmethod
    def _disconnect(server) -> None:
        # the message is already accepted once sendmail returns
        try:
            server.quit()
        except (smtplib.SMTPException, OSError) as e:
            logging.warning("SMTP QUIT failed, closing connection: %s", e)
            server.close()
