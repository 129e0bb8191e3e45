from fpdf import FPDF


def _latin1(text: str) -> str:
    """Encode to latin-1, replacing unsupported chars. fpdf built-in fonts are latin-1 only."""
    return text.encode("latin-1", errors="replace").decode("latin-1")


def _section(pdf: FPDF, heading: str, body: str | None):
    if not body:
        return
    pdf.ln(3)
    pdf.set_font("Helvetica", "B", 12)
    pdf.cell(0, 7, _latin1(heading), new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", "", 10)
    pdf.multi_cell(0, 5, _latin1(body[:20000]))


def generate_job_posting_pdf(
    title: str,
    company: str | None,
    department: str | None,
    location: str | None,
    is_remote: bool,
    employment_type: str | None,
    salary_range: str | None,
    experience_required: str | None,
    description: str,
    requirements: str | None,
    responsibilities: str | None,
    skills: list[str],
    posted_at: str,
) -> bytes:
    """Render a printable job posting."""
    pdf = FPDF()
    pdf.set_margins(20, 20, 20)
    pdf.add_page()

    pdf.set_font("Helvetica", "B", 18)
    pdf.multi_cell(0, 10, _latin1(title or "Job Posting"), align="L")
    pdf.ln(2)

    pdf.set_font("Helvetica", "", 11)
    pdf.set_text_color(80, 80, 80)

    where = location or ""
    if is_remote:
        where = f"{where} (Remote)" if where else "Remote"
    meta = [
        ("Company", company),
        ("Department", department),
        ("Location", where),
        ("Employment type", employment_type),
        ("Salary", salary_range),
        ("Experience", experience_required),
        ("Posted", posted_at),
    ]
    for label, value in meta:
        if value:
            pdf.cell(0, 7, _latin1(f"{label}: {value}"), new_x="LMARGIN", new_y="NEXT")

    pdf.ln(3)
    pdf.set_draw_color(200, 200, 200)
    pdf.line(20, pdf.get_y(), 190, pdf.get_y())
    pdf.ln(2)
    pdf.set_text_color(0, 0, 0)

    _section(pdf, "About the role", description)
    _section(pdf, "Responsibilities", responsibilities)
    _section(pdf, "Requirements", requirements)
    _section(pdf, "Skills", ", ".join(skills) if skills else None)

    return bytes(pdf.output())
