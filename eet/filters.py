# eet/filters.py
from __future__ import annotations

import django_filters
from django.db.models import Q

from eet.models import Poplatnik, Trzba


class TrzbaFilter(django_filters.FilterSet):
    """
    Filtros para listar tržby.

    - q: búsqueda por porad_cis, fik, bkp, id_provoz / id_pokl, DIČ.
    - fecha_desde / fecha_hasta: filtran por dat_trzby.
    - estado: estado EET de la tržba.
    - poplatnik: por poplatník.
    - test: solo respuestas del playground.
    """

    q = django_filters.CharFilter(method="filter_q", label="Búsqueda general")
    fecha_desde = django_filters.DateFilter(field_name="dat_trzby", lookup_expr="date__gte")
    fecha_hasta = django_filters.DateFilter(field_name="dat_trzby", lookup_expr="date__lte")
    estado = django_filters.CharFilter(field_name="estado", lookup_expr="iexact")
    poplatnik = django_filters.ModelChoiceFilter(queryset=Poplatnik.objects.all())
    test = django_filters.BooleanFilter(field_name="test")

    class Meta:
        model = Trzba
        fields = [
            "q",
            "fecha_desde",
            "fecha_hasta",
            "estado",
            "poplatnik",
            "test",
        ]

    def filter_q(self, queryset, name, value):
        if not value:
            return queryset

        value = value.strip()
        return queryset.filter(
            Q(porad_cis__icontains=value)
            | Q(fik__icontains=value)
            | Q(bkp__icontains=value)
            | Q(id_provoz__iexact=value)
            | Q(id_pokl__iexact=value)
            | Q(poplatnik__dic_popl__icontains=value)
        )
