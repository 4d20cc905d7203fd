# ui/dashboard.py
import sys, os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
import streamlit as st
import requests
import pandas as pd
from config import SETTINGS

STAGES = ["SAVED", "APPLIED", "SCREENING", "INTERVIEW", "OFFER", "REJECTED", "WITHDRAWN", "ACCEPTED"]

# -------------------- CONFIG --------------------
st.set_page_config(page_title="JobTrail", page_icon="🧭", layout="wide")
st.title("🧭 JobTrail: Application Tracker")

# -------------------- SESSION STATE --------------------
if "api_url" not in st.session_state:
    st.session_state.api_url = SETTINGS.api_url

# requests.Session keeps the httpOnly session cookie set by /api/auth/login
if "http" not in st.session_state:
    st.session_state.http = requests.Session()

if "authenticated" not in st.session_state:
    st.session_state.authenticated = False


def api(method: str, path: str, **kwargs):
    """Call the API; returns the Response, or None after showing a connection error."""
    try:
        r = st.session_state.http.request(method, f"{st.session_state.api_url}{path}", timeout=120, **kwargs)
    except requests.exceptions.RequestException as e:
        st.error(f"❌ Connection error: {e}")
        return None
    if r.status_code == 401:
        st.session_state.authenticated = False
    return r


def error_detail(r) -> str:
    try:
        return r.json().get("detail", r.text)
    except ValueError:
        return r.text


def match_badge(score) -> str:
    if score is None:
        return "⚪ not analyzed"
    if score >= 75:
        return f"🟢 {score}%"
    if score >= 50:
        return f"🟡 {score}%"
    return f"🔴 {score}%"


# -------------------- LOGIN --------------------
with st.sidebar:
    st.subheader("Session")
    if st.session_state.authenticated:
        st.success("Signed in")
        if st.button("Sign out"):
            api("POST", "/api/auth/logout")
            st.session_state.authenticated = False
            st.rerun()
    else:
        with st.form("login_form"):
            passcode = st.text_input("Passcode", type="password")
            if st.form_submit_button("Sign in"):
                r = api("POST", "/api/auth/login", json={"passcode": passcode})
                if r is not None and r.status_code == 200:
                    st.session_state.authenticated = True
                    st.rerun()
                elif r is not None:
                    st.error(error_detail(r))

if not st.session_state.authenticated:
    st.info("Sign in with your passcode to continue.")
    st.stop()

# -------------------- TABS --------------------
tab1, tab2, tab3, tab4 = st.tabs(["👤 Profile & Resume", "🧾 Jobs", "📋 Board", "📊 Metrics"])

# ==================== TAB 1: Profile & Resume ====================
with tab1:
    r = api("GET", "/api/profile")
    profile = r.json() if r is not None and r.status_code == 200 else {}

    st.subheader("Upload Resume")
    with st.form("upload_form", clear_on_submit=False):
        resume_file = st.file_uploader("Upload Resume (PDF, DOCX, or TXT)", type=["pdf", "docx", "txt"])
        submitted = st.form_submit_button("Upload & Parse Resume")

    if submitted:
        if not resume_file:
            st.warning("Please upload a resume first.")
        else:
            files = {"file": (resume_file.name, resume_file, resume_file.type)}
            with st.spinner("⏳ Uploading and parsing resume..."):
                r = api("POST", "/api/profile/resume", files=files)
            if r is not None and r.status_code == 200:
                st.success(f"✅ Stored {r.json()['fileName']}")
                profile["resumeText"] = r.json()["text"]
            elif r is not None:
                st.error(f"❌ {error_detail(r)}")

    st.subheader("Profile")
    with st.form("profile_form"):
        name = st.text_input("Name", value=profile.get("name") or "")
        email = st.text_input("Email", value=profile.get("email") or "")
        phone = st.text_input("Phone", value=profile.get("phone") or "")
        linkedin = st.text_input("LinkedIn URL", value=profile.get("linkedinUrl") or "")
        github = st.text_input("GitHub URL", value=profile.get("githubUrl") or "")
        portfolio = st.text_input("Portfolio URL", value=profile.get("portfolioUrl") or "")
        resume_text = st.text_area("Resume Text", value=profile.get("resumeText") or "", height=200)
        template = st.text_area("Cover Letter Template", value=profile.get("coverLetterTemplate") or "", height=150)
        if st.form_submit_button("Save Profile"):
            payload = {
                "name": name, "email": email, "phone": phone,
                "linkedinUrl": linkedin, "githubUrl": github, "portfolioUrl": portfolio,
                "resumeText": resume_text, "coverLetterTemplate": template,
            }
            r = api("PUT", "/api/profile", json=payload)
            if r is not None and r.status_code == 200:
                st.success("✅ Profile saved")
            elif r is not None:
                st.error(f"❌ {error_detail(r)}")

# ==================== TAB 2: Jobs ====================
with tab2:
    with st.expander("➕ Add a job manually"):
        with st.form("job_form"):
            title = st.text_input("Job Title")
            company = st.text_input("Company")
            source_url = st.text_input("Posting URL")
            description = st.text_area("Job Description", height=200)
            requirements = st.text_area("Requirements (optional)", height=100)
            if st.form_submit_button("Save Job"):
                payload = {
                    "title": title.strip(),
                    "companyName": company.strip(),
                    "description": description.strip(),
                    "requirements": requirements.strip() or None,
                    "sourceUrl": source_url.strip(),
                    "sourceSite": "manual",
                }
                with st.spinner("Saving and analyzing..."):
                    r = api("POST", "/api/jobs/scan", json=payload)
                if r is not None and r.status_code == 200:
                    res = r.json()
                    st.success("✅ Job saved" if res["isNew"] else "ℹ️ Job already scanned")
                elif r is not None:
                    st.error(f"❌ {error_detail(r)}")

    r = api("GET", "/api/jobs")
    jobs = r.json() if r is not None and r.status_code == 200 else []

    if not jobs:
        st.warning("⚠️ No jobs yet. Scan one with the browser extension or add it above.")
    else:
        table = pd.DataFrame([
            {
                "ID": j["id"],
                "Title": j["title"],
                "Company": j["company"]["name"],
                "Location": j.get("location") or "-",
                "Match": match_badge(j.get("matchScore")),
                "Stage": (j.get("application") or {}).get("stage", "-"),
                "Source": j["sourceSite"],
            }
            for j in jobs
        ])
        st.dataframe(table, hide_index=True)

        job_options = {f"{j['id']} - {j['title']} @ {j['company']['name']}": j for j in jobs}
        selected = job_options[st.selectbox("Select Job", options=list(job_options.keys()))]

        col1, col2, col3 = st.columns(3)
        if col1.button("🔍 Analyze Match"):
            with st.spinner("Analyzing..."):
                r = api("POST", f"/api/jobs/{selected['id']}/analyze")
            if r is not None and r.status_code == 200:
                selected = r.json()
            elif r is not None:
                st.error(f"❌ {error_detail(r)}")
        if col2.button("📌 Track Application", disabled=bool(selected.get("application"))):
            r = api("POST", "/api/applications", json={"jobId": selected["id"]})
            if r is not None and r.status_code == 200:
                st.rerun()
            elif r is not None:
                st.error(f"❌ {error_detail(r)}")
        if col3.button("🗑️ Delete Job"):
            r = api("DELETE", f"/api/jobs/{selected['id']}")
            if r is not None and r.status_code == 200:
                st.rerun()

        with st.container(border=True):
            st.markdown(f"### {selected['title']} - {selected['company']['name']}")
            st.markdown(f"**Match:** {match_badge(selected.get('matchScore'))}")
            if selected.get("matchingSkills"):
                st.markdown(f"**✅ Matching Skills:** {', '.join(selected['matchingSkills'])}")
            if selected.get("missingSkills"):
                st.markdown(f"**⚠️ Missing Skills:** {', '.join(selected['missingSkills'])}")
            bullets = selected.get("coverLetterBullets") or []
            if bullets:
                st.markdown("#### ✍️ Cover Letter Bullets")
                for b in bullets:
                    st.markdown(f"- {b['text']}")
                    st.caption(f"{b['targetRequirement']} · relevance {b['relevance']:.0f}")
            with st.expander("📜 View Full Job Description"):
                st.write(selected["description"])
                if selected.get("requirements"):
                    st.markdown("**Requirements**")
                    st.write(selected["requirements"])

# ==================== TAB 3: Board ====================
with tab3:
    r = api("GET", "/api/applications")
    applications = r.json() if r is not None and r.status_code == 200 else []

    if not applications:
        st.info("No tracked applications yet.")
    else:
        columns = st.columns(len(STAGES))
        for col, stage in zip(columns, STAGES):
            col.markdown(f"**{stage.title()}**")
            for a in [a for a in applications if a["stage"] == stage]:
                with col.container(border=True):
                    st.markdown(f"**{a['job']['title']}**")
                    st.caption(a["job"]["company"]["name"])
                    new_stage = st.selectbox(
                        "Stage", STAGES, index=STAGES.index(stage),
                        key=f"stage_{a['id']}", label_visibility="collapsed",
                    )
                    if new_stage != stage:
                        r = api("PUT", f"/api/applications/{a['id']}", json={"stage": new_stage})
                        if r is not None and r.status_code == 200:
                            st.rerun()

# ==================== TAB 4: Metrics ====================
with tab4:
    period = st.radio("Period", ["today", "week", "month"], index=2, horizontal=True)
    r = api("GET", "/api/metrics", params={"period": period})
    if r is not None and r.status_code == 200:
        m = r.json()
        c1, c2, c3, c4, c5 = st.columns(5)
        c1.metric("Jobs Scanned", m["totalJobs"])
        c2.metric("Applied", m["appliedJobs"])
        c3.metric("Interviews", m["interviewJobs"])
        c4.metric("Offers", m["offerJobs"])
        c5.metric("Avg Match", f"{m['avgMatchScore']:.0f}%")
        if m["recentJobs"]:
            st.markdown("### Recent Jobs")
            st.table(pd.DataFrame([
                {"Title": j["title"], "Company": j["company"]["name"], "Match": match_badge(j.get("matchScore"))}
                for j in m["recentJobs"]
            ]))
