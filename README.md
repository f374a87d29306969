# impactserver

A small WSGI web server for a game client's website. It serves:

- a `/releases.json` feed of the client's published releases;
- installer downloads (`/ImpactInstaller.jar` and `/ImpactInstaller.exe`),
  repacked on the fly from a cached copy of the released installer, with a
  per-download client id and optional nightly settings (`?nightlies=1`);
- redirects for old paths (`/stripe` to `/donate`, `/Impact/...` to the
  GitHub pages site) and a proxied `/changelog`;
- the Apple Pay domain verification text;
- static pages from a directory, with `.html` redirected away in URLs and
  added back internally.

Requests are routed by subdomain: the bare domain goes to the main site and
`new.` goes to a proxy in front of the new site. Any other subdomain gets 404.

## Installing

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Running

```
impactserver [--port PORT] [--static DIR]
```

The server listens on port 3000 unless `--port` is given or the `PORT`
environment variable holds a port number. Static pages are served from
`static` unless `--static` names another directory.

Before routing, every request is brought to the site's URL style: `www.` is
redirected away, a trailing slash is dropped, a trailing `index.html` is
redirected away, and plain-HTTP visitors arriving through Cloudflare (as
told by the `Cf-Visitor` header) are redirected to HTTPS, except for
`/releases.json`. Request bodies over 1 MiB are refused with 413.

At start-up the release list is fetched from GitHub (a failure stops the
server) and then refreshed every 15 minutes; the installer files are
downloaded in the background, and installer requests get 503 with
`Retry-After` until they are ready.

Settings come from the environment:

- `INSTALLER_VERSION`: the installer release to serve; without it installer
  downloads answer 500.
- `GITHUB_ACCESS_TOKEN`: sent when fetching releases.
- `APPLE_PAY_VERIFICATION`: the text served at
  `/.well-known/apple-developer-merchantid-domain-association`.
- `API_AUTH_SECRET`: checked by the `auth_get_param` middleware.

## Using the pieces

The sites are ordinary WSGI applications and can be mounted in any WSGI
server:

```python
from impactserver.site import web_server, new_web_server

app = web_server("static")
app.releases.refresh()
```

They are built on `impactserver.framework.App`, which takes route handlers
receiving a `Context` and middleware wrapping those handlers. `pre`
middleware runs before routing and may rewrite `ctx.path`; `use` middleware
runs after it. Handlers raise `HTTPError` to answer with an error status.

```python
from impactserver.framework import App
from impactserver.cache import cache, no_cache

app = App()
app.use(cache(86400))
app.get("/hello", lambda ctx: ctx.string(200, "hello"))
app.get("/fresh", lambda ctx: ctx.string(200, "fresh"), no_cache())
```

Middleware:

- `impactserver.cache`: `cache`, `cache_cloudflare`, `cache_until_restart`,
  `cache_until_purge`, `no_cache` set `Cache-Control`.
- `impactserver.index`: `remove_index_html`, `enforce_https`.
- `impactserver.redirect`: `strip_ext` redirects away file extensions.
- `impactserver.rewrite`: `regex_rewrite` rewrites paths by regular
  expression, with `$0`, `$1`, ... replaced by the captured groups.
- `impactserver.limit`: `limit` rate-limits per user or client address
  (token buckets, `TokenBucket` and `RateLimiter`); `auth_get_param` checks a
  shared secret in the query string; `get_user` reads the user attached to a
  request.
- `impactserver.accesslog`: `access_log` logs one line per request.

Other modules:

- `impactserver.releases`: `github_releases`, `s3_releases` (builds releases
  from a bucket listing you supply), `all_releases` and `ReleaseStore`,
  which can be given a listing function and a CDN purge callback.
- `impactserver.installer`: `Installer` and `InstallerVersion`.
- `impactserver.changelog`: the changelog, redirect and Apple Pay handlers.
- `impactserver.httpclient`: `get_request`, `json_request`, `xml_request`,
  `xml_request_with_doctype`, `form_request` for outgoing requests.
- `impactserver.proxy`: `proxy` forwards a request to another origin,
  without cookies or `Authorization`.
- `impactserver.ip`: `real_ip_if_unambiguous`, `real_ip_best_guess`.
- `impactserver.users`: users, roles, nametag info, editions and features.
- `impactserver.minecraft`: `get_profile`, `has_joined_server`.
- `impactserver.currency`: supported donation currencies and
  `calculate_share`.
- `impactserver.emails`: `is_valid_email`.
- `impactserver.rsakeys`: RSA keys to and from base64 DER strings.
- `impactserver.runners`: `do_later`, `do_repeatedly`.

## What it does not do

- The `impactserver` command only fetches releases from GitHub; it does not
  list an object-storage bucket and does not purge a CDN. Pass those in to
  `ReleaseStore` yourself.
- There is no file-download proxy for object storage, no JSON API host, no
  account storage or database, and no login or token issuing; `get_user`
  only finds a user something else has attached.
- No payments are taken: `impactserver.currency` only describes currencies
  and computes shares.
- There is no Discord or reCAPTCHA verification endpoint.