"""
MJML Email Templates
Meeting invitation and party-joined notification emails
"""

from datetime import datetime
from html import escape
from typing import Optional

# Indigo/violet color scheme
THEME = {
    "primary": "#4f46e5",
    "primary_dark": "#7c3aed",
    "success": "#10b981",
    "success_light": "#d1fae5",
    "success_text": "#065f46",
    "background": "#f3f4f6",
    "panel": "#f9fafb",
    "text_primary": "#1f2937",
    "text_secondary": "#374151",
    "text_muted": "#6b7280",
    "label": "#4b5563",
    "border": "#e5e7eb",
    "warning_bg": "#fef3c7",
    "warning_text": "#92400e",
    "info_bg": "#dbeafe",
    "info_text": "#1e40af",
}

PROMOTION_CID = "promotion-poster-image"


def _e(value) -> str:
    return escape(str(value)) if value else ""


def format_meeting_date(value: Optional[datetime]) -> str:
    """Long date, e.g. Monday, 20 October 2026"""
    if not value:
        return ""
    return f"{value:%A}, {value.day} {value:%B} {value.year}"


def get_base_template(title: str, preview_text: str, header: str, header_color: str, content_sections: str) -> str:
    """Base MJML template wrapper for all emails"""
    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <!-- Header -->
        <mj-section background-color="{header_color}" padding="40px 20px">
          <mj-column>
            <mj-text align="center" font-size="28px" font-weight="700" color="#ffffff" padding="0">
              {header}
            </mj-text>
          </mj-column>
        </mj-section>

        <!-- Main Content -->
        <mj-section background-color="#ffffff" padding="40px 40px 24px 40px">
          <mj-column>
            {content_sections}
          </mj-column>
        </mj-section>

        <!-- Footer -->
        <mj-section background-color="{THEME['panel']}" padding="30px 20px">
          <mj-column>
            <mj-text align="center" font-size="14px" color="{THEME['text_muted']}" padding="0 0 10px 0">
              This is an automated message from Meeting Scheduler
            </mj-text>
            <mj-text align="center" font-size="12px" color="#9ca3af" padding="0">
              Please contact the meeting organizer if you have any questions
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _details_table(rows: list[tuple[str, str]]) -> str:
    cells = "".join(
        f"""
        <tr>
          <td style="padding: 8px; color: {THEME['label']}; font-weight: 600; width: 140px;">{label}</td>
          <td style="padding: 8px; color: {THEME['text_primary']}; font-weight: 500;">{value}</td>
        </tr>"""
        for label, value in rows
    )
    return f"""
    <mj-table container-background-color="{THEME['panel']}" padding="16px 0 24px 0">
      {cells}
    </mj-table>
    """


def _contacts_table(participants: list[tuple[str, dict]]) -> str:
    contacts = [(label, p) for label, p in participants if p.get("name") or p.get("email")]

    if not contacts:
        rows = f"""
        <tr>
          <td style="padding: 16px; color: {THEME['text_muted']}; text-align: center; font-size: 14px;">
            Contact details will be shared closer to the meeting date.
          </td>
        </tr>"""
    else:
        rows = ""
        for index, (label, person) in enumerate(contacts):
            shade = f' style="background-color: {THEME["panel"]};"' if index % 2 == 0 else ""
            details = ""
            if person.get("name"):
                details += f'<div style="font-weight: 600;">{_e(person["name"])}</div>'
            if person.get("email"):
                email = _e(person["email"])
                details += f'<div><a href="mailto:{email}" style="color: {THEME["primary"]}; text-decoration: none;">{email}</a></div>'
            if person.get("phone"):
                details += f'<div style="color: {THEME["label"]}; font-size: 13px;">{_e(person["phone"])}</div>'
            rows += f"""
        <tr{shade}>
          <td style="padding: 12px; font-weight: 600; color: {THEME['label']}; width: 140px;">{label}:</td>
          <td style="padding: 12px; color: {THEME['text_primary']};">{details}</td>
        </tr>"""

    return f"""
    <mj-text font-size="18px" font-weight="600" color="{THEME['text_primary']}" padding="0 0 8px 0">
      👥 Meeting Contacts
    </mj-text>
    <mj-table border="1px solid {THEME['border']}" padding="0 0 24px 0">
      {rows}
    </mj-table>
    """


def promotion_section(vital_scan_url: str) -> str:
    """Vital-scan promotion block; the poster is attached inline as PROMOTION_CID"""
    return f"""
    <mj-image src="cid:{PROMOTION_CID}" alt="Promotion Poster" border-radius="12px" padding="16px 0" />
    <mj-text align="center" font-size="22px" font-weight="600" color="{THEME['text_primary']}">
      🎯 Quick Vital Scan Before Your Meeting!
    </mj-text>
    <mj-text align="center">
      Take a quick 30-second vital scan to check your health metrics before the meeting.
      Scan your vitals on the go and share insights with your host in real time.
    </mj-text>
    <mj-button href="{_e(vital_scan_url) or '#'}" background-color="{THEME['primary']}" color="#ffffff" font-weight="600" border-radius="8px">
      Start Your Vital Scan →
    </mj-button>
    """


def meeting_invitation_template(meeting, promotion_html: str = "") -> str:
    """Meeting invitation MJML template"""
    meeting_date = format_meeting_date(meeting.date)
    location_summary = ", ".join(_e(part) for part in (meeting.venue, meeting.country) if part)
    summary = f"{meeting_date} at {_e(meeting.time)}"
    if location_summary:
        summary += f" in {location_summary}"

    detail_rows = [
        ("📅 Date:", meeting_date),
        ("⏰ Time:", _e(meeting.time)),
        ("📍 Venue:", _e(meeting.venue)),
    ]
    if meeting.country:
        detail_rows.append(("🌍 Country:", _e(meeting.country)))
    if meeting.location:
        detail_rows.append(("🏢 Location Code:", _e(meeting.location)))
    detail_rows.append(
        ("🗺️ Directions:", "Please plan to arrive 10 minutes early to account for security and check-in formalities.")
    )

    description = ""
    if meeting.description:
        description = f"""
    <mj-text color="{THEME['text_muted']}">
      {_e(meeting.description)}
    </mj-text>
    """

    content = f"""
    <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
      {_e(meeting.title)}
    </mj-text>
    {description}
    <mj-text>
      <strong>Quick summary:</strong> {summary}.
    </mj-text>
    {_details_table(detail_rows)}
    {_contacts_table(meeting.participants())}
    <mj-text container-background-color="{THEME['warning_bg']}" color="{THEME['warning_text']}" font-size="14px" padding="20px">
      <strong>⚠️ Important:</strong> This is an <strong>offline meeting</strong>.
      Please bring a valid ID for building access and arrive at the venue on time.
    </mj-text>
    {promotion_html}
    """

    return get_base_template(
        title="Meeting Invitation",
        preview_text=f"{_e(meeting.title)}: {summary}",
        header="📅 Meeting Invitation",
        header_color=THEME["primary"],
        content_sections=content,
    )


def party_joined_template(meeting, joined_name: str, joined_email: Optional[str] = None) -> str:
    """Party joined notification MJML template"""
    name = _e(joined_name)
    reach = ""
    if joined_email:
        email = _e(joined_email)
        reach = f'You can reach them at <a href="mailto:{email}" style="color: {THEME["primary"]};">{email}</a>'

    content = f"""
    <mj-text container-background-color="{THEME['success_light']}" color="{THEME['success_text']}" font-size="18px" font-weight="600" padding="20px">
      {name} has joined the meeting!
    </mj-text>
    <mj-text font-size="22px" font-weight="600" color="{THEME['text_primary']}" padding="24px 0 0 0">
      {_e(meeting.title)}
    </mj-text>
    {_details_table([
        ("📅 Date:", format_meeting_date(meeting.date)),
        ("⏰ Time:", _e(meeting.time)),
        ("📍 Venue:", _e(meeting.venue)),
    ])}
    <mj-text color="{THEME['text_muted']}">
      This is to notify you that <strong style="color: {THEME['text_primary']};">{name}</strong>
      has arrived at the meeting venue. {reach}
    </mj-text>
    <mj-text container-background-color="{THEME['info_bg']}" color="{THEME['info_text']}" font-size="14px" padding="20px">
      <strong>💡 Note:</strong> Please proceed to the venue if you haven't already.
    </mj-text>
    """

    return get_base_template(
        title="Party Joined Notification",
        preview_text=f"{name} has joined: {_e(meeting.title)}",
        header="🔔 Party Joined Notification",
        header_color=THEME["success"],
        content_sections=content,
    )
