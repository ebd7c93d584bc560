"""
PDF rendering for lease agreements and rent receipts using reportlab.
Documents are built in memory and returned as bytes.
"""

from datetime import date
from io import BytesIO
from typing import List
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from rental_api.config import settings
from rental_api.models.lease import Lease
from rental_api.models.payment import RentPayment

DEFAULT_LEASE_TERMS = [
    "Rent is payable monthly in advance on or before the due date stated in each payment record.",
    "The security deposit is refundable at the end of the lease less any deductions for damage.",
    "The tenant shall keep the premises in good condition and report maintenance issues promptly.",
    "The tenant shall not sublet the premises without written consent of the landlord.",
    "Either party may end the lease according to the notice period agreed in writing.",
]


def _money(amount) -> str:
    return f"{settings.currency} {float(amount):,.2f}"


def _text(value) -> str:
    return escape(str(value)) if value is not None else "-"


class PdfService:
    """Builds lease agreements and rent receipts."""

    def __init__(self):
        self.styles = getSampleStyleSheet()
        self.styles.add(
            ParagraphStyle(
                name="DocTitle",
                parent=self.styles["Title"],
                fontSize=18,
                alignment=TA_CENTER,
                spaceAfter=12,
                textColor=colors.HexColor("#1F2937"),
            )
        )
        self.styles.add(
            ParagraphStyle(
                name="SectionHeading",
                parent=self.styles["Heading2"],
                fontSize=13,
                spaceBefore=10,
                spaceAfter=6,
            )
        )

    def _build(self, story: List) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=36,
            leftMargin=36,
            topMargin=36,
            bottomMargin=36,
        )
        doc.build(story)
        return buffer.getvalue()

    def _details_table(self, rows: List[List[str]]) -> Table:
        table = Table(rows, colWidths=[150, 330])
        table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                    ("BACKGROUND", (0, 0), (0, -1), colors.HexColor("#F3F4F6")),
                ]
            )
        )
        return table

    def generate_lease_agreement(self, lease: Lease) -> bytes:
        """
        Render the lease agreement.

        Args:
            lease: Lease with property (and its landlord) and tenant loaded

        Returns:
            PDF document bytes
        """
        property_obj = lease.property_rel
        landlord = property_obj.landlord
        tenant = lease.tenant
        styles = self.styles

        story = [
            Paragraph("Residential Lease Agreement", styles["DocTitle"]),
            Paragraph(f"Agreement date: {date.today().isoformat()}", styles["Normal"]),
            Spacer(1, 12),
            Paragraph("Landlord", styles["SectionHeading"]),
            self._details_table([
                ["Name", _text(landlord.full_name)],
                ["Email", _text(landlord.email)],
                ["Phone", _text(landlord.phone_number)],
            ]),
            Paragraph("Tenant", styles["SectionHeading"]),
            self._details_table([
                ["Name", _text(tenant.full_name)],
                ["Email", _text(tenant.email)],
                ["Phone", _text(tenant.phone_number)],
                ["NID", _text(tenant.nid)],
            ]),
            Paragraph("Property", styles["SectionHeading"]),
            self._details_table([
                ["Address", _text(property_obj.address)],
                ["City", _text(property_obj.city)],
                ["Bedrooms", _text(property_obj.bedrooms)],
                ["Bathrooms", _text(property_obj.bathrooms)],
            ]),
            Paragraph("Lease Terms", styles["SectionHeading"]),
            self._details_table([
                ["Start date", lease.start_date.isoformat()],
                ["End date", lease.end_date.isoformat() if lease.end_date else "Open-ended"],
                ["Monthly rent", _money(lease.monthly_rent)],
                ["Security deposit", _money(property_obj.security_deposit or 0)],
            ]),
            Spacer(1, 8),
        ]

        for number, term in enumerate(DEFAULT_LEASE_TERMS, start=1):
            story.append(Paragraph(f"{number}. {escape(term)}", styles["Normal"]))

        if lease.terms_and_conditions:
            story.append(Paragraph("Additional Terms", styles["SectionHeading"]))
            story.append(Paragraph(_text(lease.terms_and_conditions), styles["Normal"]))

        story.append(Spacer(1, 36))
        signatures = Table(
            [
                ["______________________", "______________________"],
                ["Landlord signature", "Tenant signature"],
                [_text(landlord.full_name), _text(tenant.full_name)],
            ],
            colWidths=[240, 240],
        )
        signatures.setStyle(TableStyle([("ALIGN", (0, 0), (-1, -1), "CENTER")]))
        story.append(signatures)

        return self._build(story)

    def generate_rent_receipt(self, payment: RentPayment) -> bytes:
        """
        Render a receipt for a paid payment.

        Args:
            payment: Payment with lease, property and tenant loaded

        Returns:
            PDF document bytes
        """
        lease = payment.lease
        property_obj = lease.property_rel
        tenant = lease.tenant
        styles = self.styles

        paid_on = payment.payment_date.date().isoformat() if payment.payment_date else "-"
        period = payment.due_date.strftime("%B %Y")

        story = [
            Paragraph("Rent Receipt", styles["DocTitle"]),
            Paragraph(f"Receipt No: {payment.id}", styles["Normal"]),
            Spacer(1, 12),
            self._details_table([
                ["Property", f"{_text(property_obj.address)}, {_text(property_obj.city)}"],
                ["Tenant", _text(tenant.full_name)],
                ["Payment date", paid_on],
                ["Amount", _money(payment.amount)],
                ["Payment method", _text(payment.payment_method)],
                ["Payment type", payment.payment_type.value.replace("_", " ").title()],
                ["Period", period],
            ]),
            Spacer(1, 18),
            Paragraph("Thank you for your payment.", styles["Normal"]),
        ]
        return self._build(story)
