# ==============================================================================
# CONTENIDO DEL SITIO - Secciones de la página de inicio
# ==============================================================================
# Textos fijos de marketing. No se persisten ni se editan desde el panel.
# Las plantillas solo iteran estas estructuras.
# ==============================================================================

HERO = {
    'eyebrow': 'Distribuidor Oficial Clamore Sul em SC',
    'title': 'Cosméticos Premium para Profissionais',
    'subtitle': (
        'Produtos capilares de alta performance para salões em Itajaí, '
        'Balneário Camboriú e litoral de Santa Catarina.'
    ),
    'stats': [
        {'value': 300, 'suffix': '+', 'label': 'Salões'},
        {'value': 72, 'suffix': 'h', 'label': 'Entrega'},
        {'value': 98, 'suffix': '%', 'label': 'Satisfação'},
    ],
}

# slug -> ícono se resuelve con KnownCategory
CATEGORY_HIGHLIGHTS = [
    {
        'title': 'Tratamento',
        'slug': 'tratamento',
        'description': 'Máscaras, óleos e séruns para reconstrução e hidratação profunda dos fios.',
        'products': '120+ produtos',
    },
    {
        'title': 'Coloração',
        'slug': 'coloracao',
        'description': 'Tintas profissionais, oxidantes e descolorantes de alta performance.',
        'products': '80+ produtos',
    },
    {
        'title': 'Finalização',
        'slug': 'finalizacao',
        'description': 'Sprays, mousses e cremes para styling e proteção térmica.',
        'products': '60+ produtos',
    },
]

PROFESSIONAL_BENEFITS = [
    {'title': 'Preços Exclusivos', 'description': 'Condições especiais para profissionais cadastrados'},
    {'title': 'Entrega Rápida', 'description': 'Receba seus produtos em até 24h na região'},
    {'title': 'Produtos Premium', 'description': 'Marcas de alta performance para seu salão'},
    {'title': 'Suporte Especializado', 'description': 'Consultores prontos para atender você'},
]

LOGISTICS = {
    'features': [
        {
            'title': 'Entrega para Todo Brasil',
            'description': 'Enviamos para todo o Brasil com agilidade. '
                           'Entrega expressa em até 24h para a região da AMFRI.',
        },
        {
            'title': 'Atendimento Ágil',
            'description': 'Consultores especializados visitam seu salão em Santa Catarina.',
        },
        {
            'title': 'Localização Estratégica',
            'description': 'Centro de distribuição em Itajaí, polo logístico do Sul do Brasil.',
        },
        {
            'title': 'Garantia de Qualidade',
            'description': 'Produtos originais com nota fiscal e suporte técnico especializado.',
        },
    ],
    'cities': [
        'Itajaí', 'Balneário Camboriú', 'Navegantes', 'Camboriú',
        'Itapema', 'Blumenau', 'Florianópolis', 'Joinville',
    ],
}

TESTIMONIALS = [
    {
        'name': 'Marina Santos',
        'role': 'Proprietária - Salão Beleza Pura',
        'content': 'A parceria com a Clamore Sul transformou meu negócio. '
                   'Produtos de qualidade excepcional e atendimento impecável.',
    },
    {
        'name': 'Carlos Ferreira',
        'role': 'Hair Stylist - Studio CF',
        'content': 'Trabalho com os produtos da Clamore há 5 anos e os resultados falam por si. '
                   'Meus clientes sempre voltam satisfeitos.',
    },
    {
        'name': 'Ana Paula Lima',
        'role': 'Colorista - Espaço Hair Design',
        'content': 'A linha de coloração é simplesmente incrível. '
                   'Cores vibrantes que duram e não danificam os fios.',
    },
]

BLOG_POSTS = [
    {
        'title': 'Cronograma Capilar: Guia Completo para Profissionais',
        'excerpt': 'Aprenda a montar um cronograma personalizado para cada tipo de cabelo '
                   'e conquiste resultados incríveis.',
        'date': '15 Dez 2024',
        'read_time': '8 min',
        'category': 'Tratamento',
    },
    {
        'title': 'Queratina: Mitos e Verdades sobre o Ativo',
        'excerpt': 'Descubra tudo sobre a queratina e como utilizá-la corretamente '
                   'nos tratamentos capilares.',
        'date': '10 Dez 2024',
        'read_time': '6 min',
        'category': 'Técnicas',
    },
    {
        'title': 'Tendências de Coloração para 2025',
        'excerpt': 'As cores e técnicas que vão dominar os salões no próximo ano. '
                   'Prepare-se para as novidades!',
        'date': '05 Dez 2024',
        'read_time': '5 min',
        'category': 'Coloração',
    },
]

LOCATION = {
    'title': 'Visite Nossa Sede',
    'description': 'Estamos localizados em Itajaí, Santa Catarina - um dos principais polos '
                   'logísticos do Sul do Brasil.',
    'highlight_title': 'Atendimento Personalizado',
    'highlight': 'Nossos consultores visitam salões em toda Santa Catarina. '
                 'Agende uma visita e conheça nosso portfólio completo de produtos Clamore.',
    'service_areas': [
        'Itajaí', 'Balneário Camboriú', 'Navegantes', 'Camboriú',
        'Florianópolis', 'Joinville', 'Blumenau', 'Brusque',
    ],
}

CONTACT = {
    'phone': '(47) 99999-9999',
    'email': 'contato@clamoresul.com.br',
    'hours': 'Seg - Sex: 9h às 18h',
    'instagram': 'https://instagram.com/clamoresul',
}


def home_sections() -> dict:
    """Todas las secciones de la página de inicio para la plantilla."""
    return {
        'hero': HERO,
        'category_highlights': CATEGORY_HIGHLIGHTS,
        'benefits': PROFESSIONAL_BENEFITS,
        'logistics': LOGISTICS,
        'testimonials': TESTIMONIALS,
        'blog_posts': BLOG_POSTS,
        'location': LOCATION,
        'contact': CONTACT,
    }
