"""
catalog.py — Suggested values offered by the project and profile forms.

Suggestions only: projects and profiles accept any role, tag or branch
string. Served read-only by GET /api/v1/projects/options.
"""

COMMON_ROLES = (
    "Frontend Developer",
    "Backend Developer",
    "Full Stack Developer",
    "UI/UX Designer",
    "Mobile Developer",
    "DevOps Engineer",
    "Data Scientist",
    "Machine Learning Engineer",
    "Product Manager",
    "QA Engineer",
    "Technical Writer",
    "Business Analyst",
    "Marketing Specialist",
    "Graphic Designer",
)

COMMON_TAGS = (
    "Web Development",
    "Mobile App",
    "Machine Learning",
    "AI",
    "Data Science",
    "Blockchain",
    "IoT",
    "Game Development",
    "E-commerce",
    "Social Media",
    "Education",
    "Healthcare",
    "Finance",
    "Entertainment",
    "Productivity",
    "Open Source",
    "Startup",
    "Research",
)

BRANCHES = (
    "Computer Science Engineering",
    "Information Technology",
    "Electronics and Communication Engineering",
    "Electrical Engineering",
    "Mechanical Engineering",
    "Civil Engineering",
    "Chemical Engineering",
    "Biotechnology",
    "Aerospace Engineering",
    "Other",
)
