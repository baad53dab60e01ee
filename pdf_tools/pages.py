# pdf_tools/pages.py
from html import escape
from typing import Optional

from .usage import UsageStore


def layout(title: str, body: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html lang="en">
    <head>
      <meta charset="UTF-8" />
      <meta name="viewport" content="width=device-width,initial-scale=1" />
      <title>{escape(title)}</title>
      <script src="https://cdn.tailwindcss.com"></script>
    </head>
    <body class="min-h-screen bg-gradient-to-br from-indigo-600 via-purple-600 to-fuchsia-600 text-white">
      <div class="max-w-3xl mx-auto p-6">
        <div class="bg-white/10 border border-white/20 backdrop-blur-xl rounded-3xl p-6 shadow-2xl">
          {body}
        </div>
      </div>
    </body>
    </html>
    """


def home_page(email: Optional[str]) -> str:
    account = (
        '<a href="/dashboard" class="underline">Dashboard</a>'
        if email
        else '<a href="/auth/signin" class="underline">Sign in</a> · <a href="/auth/signup" class="underline">Sign up</a>'
    )
    return layout(
        "PDF Tools",
        f"""
          <h1 class="text-2xl font-black">PDF Tools</h1>
          <ul class="mt-4 space-y-2 list-disc list-inside">
            <li><a href="/tools/convert" class="underline">Images to PDF / PDF to Word</a></li>
            <li>Merge PDF files: <code>POST /api/merge</code></li>
            <li>Optimize a PDF: <code>POST /api/pdf</code></li>
          </ul>
          <p class="mt-6">{account}</p>
        """,
    )


def auth_page(mode: str, callback_url: str = "/dashboard", error: Optional[str] = None) -> str:
    title = "Sign in" if mode == "signin" else "Sign up"
    other = (
        '<a href="/auth/signup" class="underline">Create an account</a>'
        if mode == "signin"
        else '<a href="/auth/signin" class="underline">Already have an account?</a>'
    )
    error_html = f'<p class="mt-4 text-red-200">{escape(error)}</p>' if error else ""
    return layout(
        title,
        f"""
          <h1 class="text-2xl font-black">{title}</h1>
          {error_html}
          <form action="/auth/{mode}" method="post" class="mt-6 space-y-4">
            <input type="hidden" name="callbackUrl" value="{escape(callback_url)}" />
            <input name="email" type="email" required placeholder="Email"
                   class="w-full px-4 py-2 rounded-xl text-gray-900" />
            <input name="password" type="password" required minlength="6" placeholder="Password"
                   class="w-full px-4 py-2 rounded-xl text-gray-900" />
            <button class="px-4 py-2 rounded-xl bg-white/20 border border-white/20 font-semibold">{title}</button>
          </form>
          <p class="mt-4">{other}</p>
        """,
    )


def dashboard_page(email: str, subscription: str, usage: UsageStore) -> str:
    if usage.subscribed:
        usage_html = "<p>Unlimited conversions</p>"
    else:
        usage_html = f"<p>Free conversions left: <b>{usage.remaining}</b> of {usage.limit}</p>"
    return layout(
        "Dashboard",
        f"""
          <div class="flex items-center justify-between">
            <h1 class="text-2xl font-black">Dashboard</h1>
            <form action="/auth/logout" method="post">
              <button class="px-4 py-2 rounded-xl bg-white/20 border border-white/20 font-semibold">Logout</button>
            </form>
          </div>
          <p class="mt-4 text-white/80">Signed in as:</p>
          <p class="text-lg font-extrabold">{escape(email)}</p>
          <p class="mt-2 text-white/80">Plan: {escape(subscription)}</p>
          <div class="mt-4">{usage_html}</div>
          <div class="mt-6">
            <a href="/tools/convert" class="underline text-white/90">Convert files →</a>
          </div>
        """,
    )


CONVERT_SCRIPT = """
    <script>
      const formats = {pdf: '.jpg,.jpeg,.png', docx: '.pdf'};
      const form = document.getElementById('convert-form');
      const select = document.getElementById('format');
      const input = document.getElementById('file');
      const errorBox = document.getElementById('error');
      const button = document.getElementById('submit');
      select.addEventListener('change', () => { input.accept = formats[select.value]; });

      function showError(text) {
        errorBox.textContent = text;
        setTimeout(() => { errorBox.textContent = ''; }, 8000);
      }

      form.addEventListener('submit', async (e) => {
        e.preventDefault();
        if (form.dataset.limitReached === 'true') { location.reload(); return; }
        const file = input.files[0];
        if (!file) return;
        const data = new FormData();
        data.append('file', file);
        data.append('format', select.value);
        data.append('isImageToPdf', String(select.value === 'pdf'));
        button.disabled = true;
        try {
          const res = await fetch('/api/convert', {method: 'POST', body: data});
          if (!res.ok) {
            const body = await res.json();
            throw new Error(body.error || 'Conversion failed');
          }
          const blob = await res.blob();
          const disposition = res.headers.get('content-disposition');
          const name = disposition
            ? decodeURIComponent(disposition.split("filename*=UTF-8''")[1])
            : 'converted.' + select.value;
          const a = document.createElement('a');
          a.href = URL.createObjectURL(blob);
          a.download = name;
          document.body.appendChild(a);
          a.click();
          URL.revokeObjectURL(a.href);
          a.remove();
          const usage = await (await fetch('/tools/usage', {method: 'POST'})).json();
          if (usage.limit_reached) location.reload();
          else document.getElementById('remaining').textContent = usage.remaining;
        } catch (err) {
          showError(err.message);
        } finally {
          button.disabled = false;
        }
      });
    </script>
"""


def convert_page(usage: UsageStore) -> str:
    if usage.limit_reached:
        upsell = """
          <div class="mt-6 p-4 rounded-2xl bg-white/20">
            <p class="font-bold">You have used all your free conversions.</p>
            <form action="/tools/subscribe" method="post" class="mt-3">
              <button class="px-4 py-2 rounded-xl bg-white text-indigo-700 font-semibold">Subscribe</button>
            </form>
          </div>
        """
    else:
        upsell = ""
    counter = (
        ""
        if usage.subscribed
        else f'<p class="mt-2 text-white/80">Conversions left: <span id="remaining">{usage.remaining}</span></p>'
    )
    limit_flag = "true" if usage.limit_reached else "false"
    return layout(
        "Convert",
        f"""
          <h1 class="text-2xl font-black">Convert files</h1>
          {counter}
          {upsell}
          <form id="convert-form" data-limit-reached="{limit_flag}" class="mt-6 space-y-4">
            <select id="format" class="w-full px-4 py-2 rounded-xl text-gray-900">
              <option value="pdf">PDF from Images</option>
              <option value="docx">Word Document (.docx)</option>
            </select>
            <input id="file" type="file" accept=".jpg,.jpeg,.png" class="w-full" />
            <button id="submit" class="px-4 py-2 rounded-xl bg-white/20 border border-white/20 font-semibold">Convert</button>
          </form>
          <p id="error" class="mt-4 text-red-200"></p>
        """ + CONVERT_SCRIPT,
    )
