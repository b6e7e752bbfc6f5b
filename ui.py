import os
import time
import urllib.parse
from typing import Any, Dict, Optional, Tuple

import requests
import streamlit as st

st.set_page_config(page_title="Profile Registry", layout="centered")

st.title("Profile Registry")
st.caption("Register once, then keep your profile up to date.")

API_BASE_URL = os.environ.get("PROFILE_REGISTRY_API_URL", "http://127.0.0.1:8000").rstrip("/")


def _healthcheck(base_url: str) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """Returns (ok, message, json_payload_if_any). Never raises."""
    try:
        resp = requests.get(f"{base_url}/healthz", timeout=2)
        if resp.status_code != 200:
            return False, f"HTTP {resp.status_code}", None
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        return True, "Healthy", payload
    except requests.exceptions.RequestException as e:
        return False, f"Not reachable: {e.__class__.__name__}", None


def _call(method: str, path: str, *, token: str = "", body: Optional[Dict[str, Any]] = None) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Returns (json, error_string). Never raises."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    try:
        resp = requests.request(method, f"{API_BASE_URL}{path}", json=body, headers=headers, timeout=10)
    except requests.exceptions.RequestException as e:
        return None, f"Request failed: {e!r}"

    if resp.status_code >= 400:
        # Show server-provided error message if available.
        try:
            detail = resp.json().get("detail")
        except ValueError:
            detail = resp.text
        return None, f"HTTP {resp.status_code}: {detail}"

    try:
        return resp.json(), None
    except ValueError as e:
        return None, f"Invalid JSON from server: {e}"


# --- Sidebar: backend status + credentials ---
with st.sidebar:
    st.subheader("Backend")
    st.write("API:", API_BASE_URL)

    now = time.time()
    if st.button("Refresh status") or (now - st.session_state.get("health_ts", 0.0)) > 3:
        ok, msg, payload = _healthcheck(API_BASE_URL)
        st.session_state.update(health_ok=ok, health_msg=msg, health_payload=payload, health_ts=now)

    payload = st.session_state.get("health_payload")
    if st.session_state.get("health_ok", False):
        st.success(f"Status: {st.session_state.get('health_msg')}")
        if isinstance(payload, dict):
            st.caption(f"Version: {payload.get('version', 'unknown')} | Records: {payload.get('records', '?')}")
    else:
        st.error(f"Status: {st.session_state.get('health_msg', 'Unknown')}")
        st.caption("Start the API with: uvicorn profile_registry.main:app --reload")

    st.subheader("Credentials")
    token = st.text_input("Bearer token", type="password")

# --- My profile ---
st.header("My profile")
if not token:
    st.info("Paste a bearer token in the sidebar to manage your profile.")
else:
    data, err = _call("GET", "/v1/profile", token=token)
    if err:
        st.error(err)
    else:
        registered = bool((data or {}).get("is_registered"))
        st.write("**Identity:**", data.get("identity"))
        st.write("**Registered:**", "yes" if registered else "no")
        if registered:
            st.write("**Registered at:**", time.strftime("%Y-%m-%d %H:%M:%S", time.gmtime(data["registered_at"])), "UTC")

        with st.form("profile"):
            name = st.text_input("Name", value=data.get("name", ""))
            age = st.number_input("Age", min_value=0, step=1, value=int(data.get("age", 0)))
            email = st.text_input("Email", value=data.get("email", ""))
            submitted = st.form_submit_button("Update profile" if registered else "Register")

        if submitted:
            body = {"name": name, "age": int(age), "email": email}
            if registered:
                _, err = _call("PUT", "/v1/profile", token=token, body=body)
            else:
                _, err = _call("POST", "/v1/profile/register", token=token, body=body)
            if err:
                st.error(err)
            else:
                st.success("Saved.")
                st.rerun()

# --- Lookup ---
st.header("Look up an identity")
identity = st.text_input("Identity")
if identity.strip():
    status, err = _call("GET", f"/v1/profile/status/{urllib.parse.quote(identity.strip(), safe='')}")
    if err:
        st.error(err)
    else:
        st.write("**Registered:**", "yes" if status.get("is_registered") else "no")
        with st.expander("Raw record"):
            record, err = _call("GET", f"/v1/records/{urllib.parse.quote(identity.strip(), safe='')}")
            st.json(record if record is not None else {"error": err})
