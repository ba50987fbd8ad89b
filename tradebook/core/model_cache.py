"""
Caching for frequently read, rarely written data: the company profile, product
detail and the customer/supplier/product option lists used to fill document
forms.

Entries are dropped by the signal handlers below whenever a row is saved or
deleted. Bulk ``update()`` calls skip the signals, so code that changes a
product that way calls ``invalidate_product_cache`` itself.
"""
from django.core.cache import cache
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

logger = logging.getLogger(__name__)

# Cache keys
COMPANY_PROFILE_KEY = 'company_profile'
OPTIONS_KEY_PREFIX = 'options:'
PRODUCT_KEY_PREFIX = 'product:'

# Cache TTL (Time To Live) in seconds
COMPANY_PROFILE_CACHE_TTL = 900  # 15 minutes
OPTIONS_CACHE_TTL = 300  # 5 minutes
PRODUCT_CACHE_TTL = 300

CACHED_OPTION_MODELS = ['Customer', 'Supplier', 'Product']


# ==================== COMPANY PROFILE ====================

def build_company_profile(settings_obj):
    """Plain dict of the header details printed on documents and messages"""
    return {
        'company_name': settings_obj.company_name,
        'company_address': settings_obj.company_address,
        'contact_detail_1': settings_obj.contact_detail_1,
        'contact_detail_2': settings_obj.contact_detail_2,
        'contact_detail_3': settings_obj.contact_detail_3,
        'email_1': settings_obj.email_1,
        'ntn': settings_obj.ntn,
        'str_no': settings_obj.str_no,
        'currency_code': settings_obj.currency_code,
        'logo_path': settings_obj.logo.path if settings_obj.logo else None,
        'primary_phone': settings_obj.primary_phone,
    }


def get_company_profile():
    """Cached company header details"""
    cached_data = cache.get(COMPANY_PROFILE_KEY)
    if cached_data:
        logger.debug("Cache hit for company profile")
        return cached_data

    from .models import CompanySettings
    cached_data = build_company_profile(CompanySettings.load())
    cache.set(COMPANY_PROFILE_KEY, cached_data, COMPANY_PROFILE_CACHE_TTL)
    return cached_data


def invalidate_company_profile():
    cache.delete(COMPANY_PROFILE_KEY)
    logger.debug("Invalidated company profile cache")


# ==================== OPTION LISTS ====================

def get_options_cache_key(model_name: str) -> str:
    """Get cache key for the active option list of a model"""
    return f"{OPTIONS_KEY_PREFIX}{model_name.lower()}"


def get_cached_options(model_name: str, loader):
    """Return the cached option list for a model, building it with ``loader`` on a miss"""
    cache_key = get_options_cache_key(model_name)
    cached_data = cache.get(cache_key)
    if cached_data is not None:
        logger.debug(f"Cache hit for {model_name} options")
        return cached_data

    cached_data = list(loader())
    cache.set(cache_key, cached_data, OPTIONS_CACHE_TTL)
    logger.debug(f"Cached {len(cached_data)} {model_name} options")
    return cached_data


def invalidate_options(model_name: str):
    cache.delete(get_options_cache_key(model_name))
    logger.debug(f"Invalidated {model_name} options cache")


# ==================== PRODUCT DETAIL ====================

def get_product_cache_key(product_id: int) -> str:
    return f"{PRODUCT_KEY_PREFIX}{product_id}"


def get_cached_product(product_id: int, loader):
    """Serialized product detail, built with ``loader`` on a miss"""
    cache_key = get_product_cache_key(product_id)
    cached_data = cache.get(cache_key)
    if cached_data is not None:
        logger.debug(f"Cache hit for product {product_id}")
        return cached_data

    cached_data = loader()
    cache.set(cache_key, cached_data, PRODUCT_CACHE_TTL)
    return cached_data


def invalidate_product_cache(product_id: int):
    """Drop one product's detail and the product option list"""
    cache.delete(get_product_cache_key(product_id))
    invalidate_options('Product')


# ==================== SIGNAL HANDLERS ====================

def _invalidate_for(model_name, instance):
    if model_name == 'CompanySettings':
        invalidate_company_profile()
    elif model_name == 'Product':
        invalidate_product_cache(instance.pk)
    elif model_name in CACHED_OPTION_MODELS:
        invalidate_options(model_name)


@receiver(post_save)
def model_post_save(sender, instance, **kwargs):
    """Drop cached data when a cached model is saved"""
    _invalidate_for(sender.__name__, instance)


@receiver(post_delete)
def model_post_delete(sender, instance, **kwargs):
    """Drop cached data when a cached model is deleted"""
    _invalidate_for(sender.__name__, instance)
