"""Tiny HTML templating with mandatory escaping.

Templates are string.Template objects; render() HTML-escapes every bound
value, so names, course titles and validation codes can never inject
markup.  There is no way to bind a raw value.
"""

from __future__ import annotations

import html
from string import Template


def render(template: Template, **values: object) -> str:
    escaped = {key: html.escape(str(value), quote=True) for key, value in values.items()}
    return template.substitute(escaped)


VERIFY_FOUND = Template("""\
<!DOCTYPE html>
<html lang="pt-BR">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Certificado Válido - $holder_name</title>
  <style>
    body { font-family: system-ui, sans-serif; background: #f8fafc;
           display: flex; justify-content: center; align-items: center;
           min-height: 100vh; margin: 0; padding: 1rem; }
    .card { background: #fff; max-width: 40rem; width: 100%; border-radius: 1rem;
            box-shadow: 0 10px 30px rgba(0,0,0,.1); overflow: hidden; }
    .head { background: #2563eb; color: #fff; text-align: center; padding: 1.5rem;
            text-transform: uppercase; letter-spacing: .1em; font-weight: 700; }
    .body { padding: 2.5rem; text-align: center; }
    .holder { font-size: 2rem; font-weight: 800; margin: .5rem 0 1.5rem; }
    .course { font-size: 1.4rem; font-weight: 700; color: #1d4ed8; margin-bottom: 2rem; }
    .meta { display: flex; justify-content: space-between; background: #f8fafc;
            border-radius: .5rem; padding: 1.5rem; }
    .label { font-size: .75rem; color: #94a3b8; text-transform: uppercase; }
    .code { font-family: monospace; font-weight: 700; letter-spacing: .1em; }
    .foot { background: #f8fafc; color: #94a3b8; text-align: center;
            font-size: .75rem; padding: 1rem; border-top: 1px solid #e2e8f0; }
  </style>
</head>
<body>
  <div class="card">
    <div class="head">Certificado Autêntico</div>
    <div class="body">
      <p class="label">Certificamos que</p>
      <p class="holder">$holder_name</p>
      <p>Concluiu com êxito o curso:</p>
      <p class="course">$course_title</p>
      <div class="meta">
        <div><p class="label">Data de Emissão</p><p>$issued_on</p></div>
        <div><p class="label">Código de Validação</p><p class="code">$validation_code</p></div>
      </div>
    </div>
    <div class="foot">$site_name - Verificação Pública Oficial</div>
  </div>
</body>
</html>
""")

# No placeholders for the submitted code: the page is byte-identical for
# every unknown, empty or malformed input.
VERIFY_NOT_FOUND = Template("""\
<!DOCTYPE html>
<html lang="pt-BR">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Certificado Não Encontrado</title>
  <style>
    body { font-family: system-ui, sans-serif; background: #f8fafc;
           display: flex; justify-content: center; align-items: center;
           min-height: 100vh; margin: 0; padding: 1rem; }
    .card { background: #fff; max-width: 28rem; width: 100%; border-radius: .75rem;
            box-shadow: 0 10px 30px rgba(0,0,0,.1); padding: 2rem; text-align: center; }
    h1 { color: #0f172a; font-size: 1.5rem; }
    a { color: #2563eb; }
  </style>
</head>
<body>
  <div class="card">
    <h1>Certificado Inválido</h1>
    <p>O código informado não foi encontrado em nossa base de dados.</p>
    <a href="/">Voltar para Home</a>
  </div>
</body>
</html>
""")

GRANT_EMAIL = Template("""\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; color: #333;">
  <div style="text-align: center; margin-bottom: 30px;">
    <h1 style="color: #2563eb;">$site_name</h1>
  </div>
  <div style="background-color: #f8fafc; padding: 30px; border-radius: 8px; border: 1px solid #e2e8f0;">
    <h2 style="color: #1e293b; margin-top: 0;">Acesso Liberado!</h2>
    <p style="line-height: 1.6;">Olá,</p>
    <p style="line-height: 1.6;">Você acaba de receber acesso ao curso <strong>$course_title</strong>.</p>
    <p style="line-height: 1.6;">$intro</p>
    <div style="text-align: center; margin: 30px 0;">
      <a href="$link" style="background-color: #2563eb; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; font-weight: bold; display: inline-block;">Acessar Plataforma</a>
    </div>
    <p style="font-size: 0.9em; color: #64748b; margin-top: 20px;">
      Ou copie este link: <br>
      <a href="$link" style="color: #2563eb;">$link</a>
    </p>
  </div>
</div>
""")

NEW_ACCOUNT_INTRO = (
    "Sua conta foi criada automaticamente. Para definir sua senha e começar "
    "a estudar, clique no botão abaixo:"
)
EXISTING_ACCOUNT_INTRO = (
    "Seu acesso foi atualizado. Se precisar redefinir sua senha, use o link abaixo:"
)
