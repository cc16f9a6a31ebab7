# recipes/admin.py

from django.contrib import admin

from recipes.models import MenuProduct, ProductAddon, RecipeLine


class RecipeLineInline(admin.TabularInline):
    model = RecipeLine
    extra = 1
    autocomplete_fields = ("raw_item",)


@admin.register(MenuProduct)
class MenuProductAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant_id", "price", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "tenant_id")
    inlines = [RecipeLineInline]


@admin.register(ProductAddon)
class ProductAddonAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant_id", "price", "raw_item", "quantity_per_unit", "unit", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "tenant_id")
    autocomplete_fields = ("raw_item",)
