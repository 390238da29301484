import os
import logging
from datetime import datetime

from .converters import ConverterRegistry
from .hooks import Hooks
from .layouts import LayoutRegistry
from .liquid import LiquidRenderer
from .models import Document, Pager
from .regenerator import DependencyTracker
from .renderer import Renderer
from .settings import PagewrightSettings


class InfoFilter(logging.Filter):
    """Filter to allow only selected INFO messages (and anything louder) on the console."""
    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        allowed_messages = [
            "Rendered ",
            "Render completed in",
            "Loaded ",
        ]
        return any(msg in record.getMessage() for msg in allowed_messages)


class Site:
    """
    Holds everything a render needs beyond the document itself: settings,
    converters, layouts, the liquid renderer, hooks and dependency tracking.
    """

    def __init__(self, config=None, converters=None, layouts=None, liquid_renderer=None,
                 regenerator=None, hooks=None, logger=None):
        self.config = PagewrightSettings.DEFAULT_SETTINGS.copy()
        self.config.update(config or {})
        self.source = os.path.abspath(self.config['source'])
        self.time = datetime.now()

        self.logger = logger or self.setup_logging()

        self.converters = converters if converters is not None else ConverterRegistry.default(self.config)
        self.layouts = layouts if layouts is not None else LayoutRegistry()
        self.liquid_renderer = liquid_renderer or LiquidRenderer(
            includes_dir=self.in_source_dir(self.config['includes_dir']),
            strict_variables=self.config['strict_variables'],
            warn_unknown_variables=self.config['liquid_warnings'],
        )
        metadata_file = self.config.get('metadata_file')
        self.regenerator = regenerator or DependencyTracker(
            metadata_file=self.in_source_dir(metadata_file) if metadata_file else None,
            disabled=not self.config.get('incremental'),
        )
        self.hooks = hooks or Hooks()

        self.posts = []
        self.pages = []

    def setup_logging(self):
        """Set up logging configuration."""
        logger = logging.getLogger('Pagewright')
        logger.setLevel(getattr(logging, str(self.config.get('log_level') or 'INFO').upper(), logging.INFO))

        if not logger.handlers:
            # Console handler with filter
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.addFilter(InfoFilter())
            console_handler.setFormatter(logging.Formatter('%(message)s'))
            logger.addHandler(console_handler)

            # File handler for all logs
            log_dir = self.config.get('log_dir')
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
                log_filename = datetime.now().strftime('pagewright_%Y-%m-%d_%H-%M-%S.log')
                file_handler = logging.FileHandler(os.path.join(log_dir, log_filename))
                file_handler.setLevel(logging.DEBUG)
                file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
                logger.addHandler(file_handler)

        return logger

    def in_source_dir(self, *paths):
        return os.path.normpath(os.path.join(self.source, *paths))

    def read(self):
        """Load layouts and posts from the source directory."""
        self.layouts.load(self.in_source_dir(self.config['layouts_dir']), self.source)
        self.posts = self.read_posts()
        self.assign_related_posts()
        if self.config.get('incremental'):
            self.regenerator.read_metadata()
        self.logger.info(f"Loaded {len(self.layouts)} layouts and {len(self.posts)} posts")

    def read_posts(self):
        posts_dir = self.in_source_dir(self.config['posts_dir'])
        if not os.path.isdir(posts_dir):
            return []
        posts = []
        for root, dirs, files in os.walk(posts_dir):
            dirs[:] = [d for d in dirs if not d.startswith(('.', '_'))]
            for file in sorted(files):
                if file.startswith(('.', '_')):
                    continue
                post = self.load_document(os.path.join(root, file), collection='posts')
                if post.data.get('published') is False:
                    self.logger.debug(f"Skipping unpublished post: {post.relative_path}")
                    continue
                posts.append(post)
        # Newest first, ties by path
        posts.sort(key=lambda p: p.relative_path)
        posts.sort(key=lambda p: p.date, reverse=True)
        return posts

    def read_document(self, path):
        """Read a single source file, reusing the post already loaded for it."""
        path = os.path.abspath(path)
        for post in self.posts:
            if post.path == path:
                return post
        posts_dir = self.in_source_dir(self.config['posts_dir'])
        collection = 'posts' if path.startswith(posts_dir + os.sep) else None
        return self.load_document(path, collection=collection)

    def load_document(self, path, collection=None):
        document = Document.from_file(path, self.source, collection=collection)
        document.excerpt_separator = self.config.get('excerpt_separator') or Document.excerpt_separator
        return document

    def output_ext_for(self, document):
        return Renderer(self, document, site_payload={}).output_ext

    def assign_related_posts(self):
        """Give every post the most recent other posts, up to related_posts_limit."""
        limit = self.config['related_posts_limit']
        liquid = [(post, post.to_liquid(self.output_ext_for(post))) for post in self.posts]
        for post in self.posts:
            post.related_posts = [data for other, data in liquid if other is not post][:limit]

    def site_payload(self):
        """The site-wide base payload every render starts from."""
        site = dict(self.config)
        site.update({
            'time': self.time,
            'posts': [post.to_liquid(self.output_ext_for(post)) for post in self.posts],
            'pages': [page.to_liquid(self.output_ext_for(page)) for page in self.pages],
            'related_posts': None,
        })
        return {'site': site}

    def paginate(self, document):
        """Attach a pager to the site index when pagination is enabled."""
        per_page = self.config.get('paginate')
        if not per_page or document.pager is not None or document.collection:
            return
        if document.basename_without_ext != 'index':
            return
        posts = self.site_payload()['site']['posts']
        document.pager = Pager(posts, 1, per_page, self.config['paginate_path'])

    def renderer_for(self, document, site_payload=None):
        return Renderer(self, document, site_payload=site_payload, logger=self.logger)

    def render(self, document):
        """Render a document through templating, converters and layouts."""
        self.paginate(document)
        output = self.renderer_for(document).render_document()
        self.regenerator.add(document.path)
        self.logger.info(f"Rendered {document.relative_path}")
        return output
